"""Click commands for batch-tool."""
