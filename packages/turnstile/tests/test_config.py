"""Tests for MachineConfig."""
import dataclasses

import pytest

from turnstile import MachineConfig


def test_defaults():
    config = MachineConfig()
    assert config.name == "machine"
    assert config.record_rejected is True
    assert config.notify_rejected is True


def test_custom_values():
    config = MachineConfig(name="lock", record_rejected=False, notify_rejected=False)
    assert config.name == "lock"
    assert config.record_rejected is False
    assert config.notify_rejected is False


def test_frozen():
    config = MachineConfig()
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.name = "other"


def test_empty_name_raises():
    with pytest.raises(ValueError, match="non-empty"):
        MachineConfig(name="")
