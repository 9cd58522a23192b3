"""
Schedule change notifications.

Connected front-desk boards join the ``schedule`` channel group and
receive a ``schedule.changed`` event once the write has committed.
"""
import logging
from typing import Iterable

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer
from django.db import transaction

logger = logging.getLogger(__name__)

SCHEDULE_GROUP = 'schedule'


def notify_schedule_changed(action: str, appointment_ids: Iterable[int], dates: Iterable) -> None:
    payload = {
        'type': 'schedule.changed',
        'action': action,
        'appointmentIds': [int(i) for i in appointment_ids],
        'dates': sorted({d.isoformat() if hasattr(d, 'isoformat') else str(d) for d in dates}),
    }

    def _send():
        channel_layer = get_channel_layer()
        if channel_layer is None:
            return
        async_to_sync(channel_layer.group_send)(SCHEDULE_GROUP, payload)
        logger.debug("Broadcast %s for appointments %s", action, payload['appointmentIds'])

    transaction.on_commit(_send, robust=True)
