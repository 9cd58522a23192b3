import json

from channels.generic.websocket import AsyncWebsocketConsumer

from clinic.services.broadcast import SCHEDULE_GROUP


class ScheduleConsumer(AsyncWebsocketConsumer):
    """Pushes ``schedule.changed`` events to connected front-desk boards."""
    GROUP = SCHEDULE_GROUP

    async def connect(self):
        user = self.scope.get("user")
        if not (user and user.is_authenticated):
            await self.close()
            return
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def schedule_changed(self, event):
        # event: {"type": "schedule.changed", "action": str, "appointmentIds": [...], "dates": [...]}
        await self.send(json.dumps(event))
