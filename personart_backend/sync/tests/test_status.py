from __future__ import annotations

from django.test import SimpleTestCase

from personart_backend.sync.exceptions import InvalidTransition
from personart_backend.sync.notifications import ERROR, INFO, WARNING, Notifier
from personart_backend.sync.status import ConnectionMonitor, ConnectionStatus


class ConnectionMonitorTest(SimpleTestCase):
    def test_starts_checking(self):
        monitor = ConnectionMonitor()
        self.assertEqual(monitor.status, ConnectionStatus.CHECKING)
        self.assertFalse(monitor.is_offline)

    def test_unknown_initial_status(self):
        with self.assertRaises(ValueError):
            ConnectionMonitor("sleeping")

    def test_connected_error_round_trip(self):
        monitor = ConnectionMonitor()
        self.assertEqual(monitor.mark_connected(), ConnectionStatus.CONNECTED)
        self.assertEqual(monitor.mark_error(), ConnectionStatus.ERROR)
        self.assertEqual(monitor.mark_connected(), ConnectionStatus.CONNECTED)
        self.assertEqual(monitor.mark_checking(), ConnectionStatus.CHECKING)

    def test_same_status_is_noop(self):
        monitor = ConnectionMonitor()
        monitor.mark_connected()
        self.assertEqual(monitor.mark_connected(), ConnectionStatus.CONNECTED)

    def test_connected_cannot_go_offline(self):
        monitor = ConnectionMonitor()
        monitor.mark_connected()
        self.assertFalse(monitor.can_transition(ConnectionStatus.OFFLINE))
        with self.assertRaises(InvalidTransition) as ctx:
            monitor.mark_offline()
        self.assertEqual(ctx.exception.current, ConnectionStatus.CONNECTED)
        self.assertEqual(ctx.exception.target, ConnectionStatus.OFFLINE)

    def test_offline_is_sticky(self):
        monitor = ConnectionMonitor()
        monitor.mark_offline()
        self.assertTrue(monitor.is_offline)
        for target in (ConnectionStatus.CONNECTED, ConnectionStatus.ERROR, ConnectionStatus.CHECKING):
            with self.assertRaises(InvalidTransition):
                monitor.transition(target)
        self.assertEqual(monitor.mark_offline(), ConnectionStatus.OFFLINE)


class NotifierTest(SimpleTestCase):
    def test_drain_returns_and_clears(self):
        notifier = Notifier()
        notifier.info("saved")
        notifier.warning("sync failed")

        drained = notifier.drain()

        self.assertEqual([(n.level, n.message) for n in drained], [(INFO, "saved"), (WARNING, "sync failed")])
        self.assertEqual(notifier.drain(), [])

    def test_queue_is_bounded(self):
        notifier = Notifier(maxlen=2)
        for i in range(3):
            notifier.error(f"e{i}")
        self.assertEqual([n.message for n in notifier.pending()], ["e1", "e2"])
        self.assertEqual(notifier.pending()[0].level, ERROR)

    def test_to_dict(self):
        data = Notifier().success("ok").to_dict()
        self.assertEqual(set(data), {"level", "message", "created_at"})
