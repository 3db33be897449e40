"""
Unit tests for batchtool.config module
"""
import json
import os
from datetime import timedelta
from pathlib import Path
from unittest.mock import patch

import pytest

from batchtool.config import (
    load_config,
    get_config_path,
    get_default_config,
    merge_configs,
    apply_env_overrides,
    get_setting,
    parse_duration,
    default_git_directory,
    normalize_keys,
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate config discovery from the real environment."""
    for key in list(os.environ):
        if key.startswith('BATCHTOOL_'):
            monkeypatch.delenv(key)
    monkeypatch.setenv('XDG_CONFIG_HOME', str(tmp_path / 'xdg'))
    monkeypatch.setenv('GOPATH', str(tmp_path / 'go'))
    monkeypatch.chdir(tmp_path)
    return tmp_path


class TestDefaultConfig:
    """Test default configuration structure"""

    def test_sections(self):
        config = get_default_config()
        for section in ('git', 'repos', 'github', 'logging'):
            assert section in config

    def test_repos_defaults(self):
        repos = get_default_config()['repos']
        assert repos['sort'] is True
        assert repos['skip_unwanted'] is True
        assert repos['unwanted_labels'] == ['deprecated', 'poc']
        assert repos['catch_all'] == 'all'
        assert repos['cache']['ttl'] == '24h'
        assert repos['tokens'] == {'label': '~', 'skip': '!', 'forced': '+'}

    def test_git_defaults(self, clean_env):
        git = get_default_config()['git']
        assert git['host'] == 'github.com'
        assert git['provider'] == 'github'
        assert git['directory'] == str(clean_env / 'go' / 'src')


class TestDefaultGitDirectory:
    """Test git directory discovery"""

    def test_gopath(self, monkeypatch, tmp_path):
        monkeypatch.setenv('GOPATH', str(tmp_path))
        assert default_git_directory() == str(tmp_path / 'src')

    def test_falls_back_to_cwd_without_go(self, monkeypatch, tmp_path):
        monkeypatch.delenv('GOPATH', raising=False)
        monkeypatch.chdir(tmp_path)
        with patch('batchtool.config.subprocess.run', side_effect=FileNotFoundError):
            assert default_git_directory() == str(tmp_path)


class TestLoadConfig:
    """Test configuration file loading"""

    def test_no_file_gives_defaults(self, clean_env):
        config = load_config()
        assert config['repos']['catch_all'] == 'all'

    def test_json_file(self, clean_env):
        path = clean_env / 'custom.json'
        path.write_text(json.dumps({'git': {'project': 'acme'}, 'repos': {'sort': False}}))

        config = load_config(str(path))
        assert config['git']['project'] == 'acme'
        assert config['repos']['sort'] is False
        # Untouched defaults survive the merge
        assert config['git']['host'] == 'github.com'

    def test_toml_file(self, clean_env):
        path = clean_env / 'batch-tool.toml'
        path.write_text('[git]\nproject = "acme"\n\n[repos.aliases]\ncore = ["acme/api-server"]\n')

        config = load_config()
        assert config['git']['project'] == 'acme'
        assert config['repos']['aliases'] == {'core': ['acme/api-server']}

    def test_yaml_file(self, clean_env):
        xdg = clean_env / 'xdg'
        xdg.mkdir()
        (xdg / 'batch-tool.yaml').write_text('repos:\n  unwanted_labels: [archived]\n')

        config = load_config()
        assert config['repos']['unwanted_labels'] == ['archived']

    def test_hyphenated_keys(self, clean_env):
        (clean_env / 'batch-tool.yaml').write_text(
            'git:\n'
            '  default-branch: trunk\n'
            'repos:\n'
            '  skip-unwanted: false\n'
            '  unwanted-labels: [archived]\n'
            '  catch-all: everything\n'
        )

        config = load_config()
        assert config['git']['default_branch'] == 'trunk'
        assert config['repos']['skip_unwanted'] is False
        assert config['repos']['unwanted_labels'] == ['archived']
        assert config['repos']['catch_all'] == 'everything'
        assert 'skip-unwanted' not in config['repos']

    def test_env_var_path(self, clean_env, monkeypatch):
        path = clean_env / 'elsewhere.json'
        path.write_text(json.dumps({'repos': {'catch_all': 'everything'}}))
        monkeypatch.setenv('BATCHTOOL_CONFIG', str(path))

        assert get_config_path() == path
        assert load_config()['repos']['catch_all'] == 'everything'

    def test_cwd_before_xdg(self, clean_env):
        xdg = clean_env / 'xdg'
        xdg.mkdir()
        (xdg / 'batch-tool.json').write_text('{}')
        (clean_env / 'batch-tool.json').write_text('{}')

        assert get_config_path() == Path.cwd() / 'batch-tool.json'

    def test_invalid_file_falls_back_to_defaults(self, clean_env):
        path = clean_env / 'batch-tool.json'
        path.write_text('{not json')

        config = load_config()
        assert config['repos']['catch_all'] == 'all'

    def test_missing_explicit_file(self, clean_env):
        config = load_config(str(clean_env / 'missing.json'))
        assert config['repos']['catch_all'] == 'all'


class TestMergeConfigs:
    """Test recursive merging"""

    def test_nested_merge(self):
        base = {'a': {'b': 1, 'c': 2}, 'd': 3}
        merged = merge_configs(base, {'a': {'b': 10}})
        assert merged == {'a': {'b': 10, 'c': 2}, 'd': 3}
        assert base['a']['b'] == 1

    def test_lists_replace(self):
        merged = merge_configs({'x': [1, 2]}, {'x': [3]})
        assert merged == {'x': [3]}


class TestEnvOverrides:
    """Test BATCHTOOL_* environment overrides"""

    def test_boolean(self, clean_env, monkeypatch):
        monkeypatch.setenv('BATCHTOOL_REPOS_SKIP_UNWANTED', 'false')
        config = apply_env_overrides(get_default_config())
        assert config['repos']['skip_unwanted'] is False

    def test_nested_string(self, clean_env, monkeypatch):
        monkeypatch.setenv('BATCHTOOL_REPOS_CACHE_TTL', '1h')
        config = apply_env_overrides(get_default_config())
        assert config['repos']['cache']['ttl'] == '1h'

    def test_integer(self, clean_env, monkeypatch):
        monkeypatch.setenv('BATCHTOOL_GITHUB_TIMEOUT_SECONDS', '5')
        config = apply_env_overrides(get_default_config())
        assert config['github']['timeout_seconds'] == 5

    def test_list_from_commas(self, clean_env, monkeypatch):
        monkeypatch.setenv('BATCHTOOL_GIT_PROJECTS', 'acme, widgets')
        config = apply_env_overrides(get_default_config())
        assert config['git']['projects'] == ['acme', 'widgets']

    def test_unknown_key_ignored(self, clean_env, monkeypatch):
        monkeypatch.setenv('BATCHTOOL_NOPE_THING', 'x')
        config = apply_env_overrides(get_default_config())
        assert 'nope' not in config


class TestGetSetting:
    """Test dotted setting lookup"""

    def test_found(self):
        assert get_setting({'a': {'b': {'c': 1}}}, 'a.b.c') == 1

    def test_missing(self):
        assert get_setting({'a': {}}, 'a.b.c', 'dflt') == 'dflt'

    def test_through_non_dict(self):
        assert get_setting({'a': 5}, 'a.b') is None


class TestParseDuration:
    """Test duration parsing"""

    @pytest.mark.parametrize("value,expected", [
        ("24h", timedelta(hours=24)),
        ("1h30m", timedelta(hours=1, minutes=30)),
        ("5s", timedelta(seconds=5)),
        ("250ms", timedelta(milliseconds=250)),
        ("7d", timedelta(days=7)),
        ("90", timedelta(seconds=90)),
        (60, timedelta(seconds=60)),
        (timedelta(minutes=2), timedelta(minutes=2)),
    ])
    def test_valid(self, value, expected):
        assert parse_duration(value) == expected

    @pytest.mark.parametrize("value", ["", "soon", "5x", "h", "1h junk"])
    def test_invalid(self, value):
        with pytest.raises(ValueError):
            parse_duration(value)


class TestNormalizeKeys:
    """Test hyphenated setting names"""

    def test_nested(self):
        config = normalize_keys({'repos': {'cache': {'some-key': 1}}, 'git': {'default-branch': 'dev'}})
        assert config == {'repos': {'cache': {'some_key': 1}}, 'git': {'default_branch': 'dev'}}

    def test_alias_names_kept(self):
        config = normalize_keys({'repos': {'aliases': {'my-team': ['acme/web-app']}}})
        assert config['repos']['aliases'] == {'my-team': ['acme/web-app']}
