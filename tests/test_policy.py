import pytest
from watchdog.events import DirModifiedEvent, FileModifiedEvent

from hostelfix.core import ConfigurationException
from hostelfix.sla.domain import SLAPolicy
from hostelfix.sla.infrastructure import (
    PolicyFileHandler,
    StaticPolicyProvider,
    YAMLPolicyProvider,
    load_policy,
)


@pytest.fixture
def policy_file(tmp_path):
    path = tmp_path / "sla_policy.yaml"
    path.write_text("sla:\n  open_hours: 12\n  assigned_hours: 36\n  warning_threshold_percent: 20\n")
    return path


class TestLoadPolicy:
    def test_nested_section(self, policy_file):
        assert load_policy(policy_file) == SLAPolicy(open_hours=12, assigned_hours=36, warning_threshold_percent=20)

    def test_flat_mapping(self, tmp_path):
        path = tmp_path / "flat.yaml"
        path.write_text("open_hours: 6\n")

        policy = load_policy(path)

        assert policy.open_hours == 6
        assert policy.assigned_hours == 48

    def test_missing_file_uses_defaults(self, tmp_path):
        assert load_policy(tmp_path / "absent.yaml") == SLAPolicy()

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert load_policy(path) == SLAPolicy()

    @pytest.mark.parametrize("content", [
        "sla: [unclosed",
        "sla:\n  open_hours: 0\n",
        "sla:\n  warning_threshold_percent: 150\n",
        "- just\n- a list\n",
    ])
    def test_invalid_files(self, tmp_path, content):
        path = tmp_path / "bad.yaml"
        path.write_text(content)

        with pytest.raises(ConfigurationException):
            load_policy(path)


class TestYAMLPolicyProvider:
    def test_reload_picks_up_changes(self, policy_file):
        provider = YAMLPolicyProvider(policy_file)
        policy_file.write_text("sla:\n  open_hours: 8\n")

        assert provider.reload() is True
        assert provider.get_policy().open_hours == 8

    def test_bad_reload_keeps_last_good_policy(self, policy_file):
        provider = YAMLPolicyProvider(policy_file)
        policy_file.write_text("sla:\n  open_hours: -1\n")

        assert provider.reload() is False
        assert provider.get_policy().open_hours == 12

    def test_watching_absent_file_is_noop(self, tmp_path):
        provider = YAMLPolicyProvider(tmp_path / "absent.yaml")

        provider.start_watching()
        provider.stop_watching()

        assert provider.get_policy() == SLAPolicy()

    def test_file_event_triggers_reload(self, policy_file, tmp_path):
        provider = YAMLPolicyProvider(policy_file)
        handler = PolicyFileHandler(provider, policy_file)
        policy_file.write_text("sla:\n  assigned_hours: 72\n")

        handler.on_modified(FileModifiedEvent(str(tmp_path / "other.yaml")))
        handler.on_modified(DirModifiedEvent(str(tmp_path)))
        assert provider.get_policy().assigned_hours == 36

        handler.on_modified(FileModifiedEvent(str(policy_file)))
        assert provider.get_policy().assigned_hours == 72


def test_static_provider():
    assert StaticPolicyProvider().get_policy() == SLAPolicy()
    custom = SLAPolicy(open_hours=2)
    assert StaticPolicyProvider(custom).get_policy() is custom
