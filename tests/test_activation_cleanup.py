"""
Mount points and stored activations are released once a wizard is done with them.
"""

from __future__ import annotations

from functools import partial

from bookflow.domain.entities.wizard_state import WizardStep
from bookflow.infrastructure.payments.card_element import MountPointRegistry
from bookflow.infrastructure.store.memory_store import MemoryWizardStore
from bookflow.wiring.dependencies import build_booking_wizard, get_mount_registry

from conftest import walk_to_summary


def test_closed_wizards_leave_no_mount_points_behind():
    registry = get_mount_registry()
    before = len(registry)

    for _ in range(50):
        wizard = build_booking_wizard()
        wizard.open()
        wizard.close()

    assert len(registry) == before


def test_confirmed_wizard_releases_its_mount_point(make_wizard):
    registry = MountPointRegistry()
    key = "public:client-1"
    wizard = make_wizard(card_element=registry.get(key), on_release=partial(registry.discard, key))
    walk_to_summary(wizard, "cash")
    assert registry.get(key).live_element() == wizard.card_element_id

    wizard.confirm()

    assert wizard.step is WizardStep.confirmed
    assert len(registry) == 0


def test_mount_point_in_use_by_newer_activation_is_kept(make_wizard):
    registry = MountPointRegistry()
    key = "public:client-1"
    older = make_wizard(card_element=registry.get(key), on_release=partial(registry.discard, key))
    older.close()
    newer = make_wizard(card_element=registry.get(key), on_release=partial(registry.discard, key))
    walk_to_summary(newer, "cash")

    assert registry.discard(key) is False
    assert len(registry) == 1
    assert registry.get(key).owner == newer.activation_id


def test_idle_activations_are_evicted_and_disposed(make_wizard, mount):
    store = MemoryWizardStore(ttl_seconds=60)
    idle = make_wizard()
    walk_to_summary(idle, "card")
    idle.confirm()
    store.put("idle", idle, now_ts=0)
    store.put("busy", make_wizard(), now_ts=0)

    assert store.get("busy", now_ts=50) is not None
    store.put("fresh", make_wizard(), now_ts=100)

    assert store.get("idle", now_ts=100) is None
    assert store.get("busy", now_ts=100) is not None
    assert len(store) == 2
    assert idle.payment_intent is None
    assert mount.live_element() is None


def test_remove_forgets_activation():
    store = MemoryWizardStore()
    store.put("a", object(), now_ts=0)
    store.remove("a")
    assert store.get("a", now_ts=1) is None
    assert len(store) == 0
