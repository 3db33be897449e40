"""Tests for the domain layer."""

import pytest

from batchtool.domain import (
    Repository, qualify, PROptions, PRMergeOptions, Capabilities, validate_pr_options,
    PullRequest,
)


class TestRepository:
    """Tests for Repository domain object."""

    def test_qualified_name_with_project(self):
        """Test project-qualified key."""
        repo = Repository(name="web-app", project="acme")
        assert repo.qualified_name == "acme/web-app"
        assert str(repo) == "acme/web-app"

    def test_qualified_name_without_project(self):
        """Test bare name is used when no project is set."""
        assert Repository(name="web-app").qualified_name == "web-app"

    def test_qualify(self):
        """Test module-level key helper."""
        assert qualify("web-app", "acme") == "acme/web-app"
        assert qualify("web-app", "") == "web-app"
        assert qualify("web-app", None) == "web-app"

    def test_to_dict_omits_empty_labels(self):
        """Test serialization leaves out an empty label list."""
        data = Repository(name="web-app", project="acme").to_dict()
        assert 'labels' not in data
        assert data['name'] == "web-app"
        assert data['public'] is False

    def test_round_trip(self):
        """Test from_dict restores what to_dict wrote."""
        repo = Repository(
            name="web-app",
            description="Storefront",
            public=True,
            project="acme",
            default_branch="develop",
            labels=("frontend", "ui"),
        )
        assert Repository.from_dict(repo.to_dict()) == repo

    def test_from_dict_defaults(self):
        """Test minimal cache entry."""
        repo = Repository.from_dict({'name': 'worker'})
        assert repo.description == ""
        assert repo.labels == ()
        assert repo.project == ""

    def test_from_dict_null_fields(self):
        """Test null values are treated as missing."""
        repo = Repository.from_dict({'name': 'worker', 'description': None, 'labels': None})
        assert repo.description == ""
        assert repo.labels == ()

    @pytest.mark.parametrize("entry", [
        None,
        [],
        {},
        {'name': 42},
        {'name': 'x', 'labels': 'frontend'},
        {'name': 'x', 'labels': [1, 2]},
    ])
    def test_from_dict_invalid(self, entry):
        """Test malformed entries are rejected."""
        with pytest.raises(ValueError):
            Repository.from_dict(entry)

    def test_immutable(self):
        """Test repositories cannot be mutated."""
        repo = Repository(name="web-app")
        with pytest.raises(AttributeError):
            repo.name = "other"

    def test_has_label(self):
        repo = Repository(name="web-app", labels=("frontend",))
        assert repo.has_label("frontend")
        assert not repo.has_label("backend")


class TestPullRequestOptions:
    """Tests for pull request option validation."""

    def test_none_options_are_valid(self):
        validate_pr_options(Capabilities(), None)

    def test_plain_options_need_no_capabilities(self):
        """Test title/description/reviewers work on any provider."""
        validate_pr_options(Capabilities(), PROptions(title="t", reviewers=["alice"]))

    def test_team_reviewers_unsupported(self):
        with pytest.raises(ValueError, match="team reviewers"):
            validate_pr_options(Capabilities(), PROptions(team_reviewers=["core"]))

    def test_reset_reviewers_unsupported(self):
        with pytest.raises(ValueError, match="resetting reviewers"):
            validate_pr_options(Capabilities(), PROptions(reset_reviewers=True))

    def test_draft_unsupported(self):
        """Test any explicit draft value needs draft support."""
        with pytest.raises(ValueError, match="draft"):
            validate_pr_options(Capabilities(), PROptions(draft=False))

    def test_merge_method_unsupported(self):
        caps = Capabilities(merge_methods=("merge",))
        with pytest.raises(ValueError, match="squash"):
            validate_pr_options(caps, PROptions(merge=PRMergeOptions(method="squash")))

    def test_merge_method_supported(self):
        caps = Capabilities(merge_methods=("merge", "squash"))
        validate_pr_options(caps, PROptions(merge=PRMergeOptions(method="squash")))

    def test_check_mergeable_unsupported(self):
        with pytest.raises(ValueError, match="mergeability"):
            validate_pr_options(Capabilities(), PROptions(merge=PRMergeOptions(check_mergeable=True)))

    def test_pull_request_to_dict(self):
        """Test optional fields are left out when unset."""
        pr = PullRequest(title="Bump", branch="bump", repo="web-app", number=3)
        data = pr.to_dict()
        assert data['number'] == 3
        assert 'draft' not in data
        assert 'team_reviewers' not in data
