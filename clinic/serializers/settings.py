from rest_framework import serializers

from clinic.services.slots import normalize_time_label, parse_time_label


def _label(value: str) -> str:
    try:
        return normalize_time_label(value)
    except ValueError:
        raise serializers.ValidationError(f'"{value}" is not a valid time such as "9:00 AM".')


class TimeSlotSerializer(serializers.Serializer):
    time = serializers.CharField(max_length=16)
    active = serializers.BooleanField(default=True)

    def validate_time(self, v):
        return _label(v)


class BlackoutSerializer(serializers.Serializer):
    start = serializers.CharField(max_length=16)
    end = serializers.CharField(max_length=16)

    def validate(self, attrs):
        start, end = _label(attrs['start']), _label(attrs['end'])
        if parse_time_label(start) >= parse_time_label(end):
            raise serializers.ValidationError('Blackout start must be before its end.')
        return {'start': start, 'end': end}


class AppointmentSettingsSerializer(serializers.Serializer):
    timeSlots = TimeSlotSerializer(many=True, required=False)
    openingTime = serializers.CharField(required=False, max_length=16)
    closingTime = serializers.CharField(required=False, max_length=16)
    slotMinutes = serializers.IntegerField(required=False, min_value=5, max_value=240)
    advanceBookingDays = serializers.IntegerField(required=False, min_value=0, max_value=365)
    appointmentTypes = serializers.ListField(child=serializers.CharField(max_length=64), required=False)
    durations = serializers.ListField(child=serializers.IntegerField(min_value=5, max_value=480), required=False)
    blackouts = BlackoutSerializer(many=True, required=False)
    closedWeekdays = serializers.ListField(child=serializers.IntegerField(min_value=0, max_value=6), required=False)

    def validate_openingTime(self, v):
        return _label(v)

    def validate_closingTime(self, v):
        return _label(v)

    def validate_timeSlots(self, v):
        seen = set()
        slots = []
        for entry in v:
            if entry['time'] in seen:
                continue
            seen.add(entry['time'])
            slots.append({'time': entry['time'], 'active': entry['active']})
        return slots

    def validate(self, attrs):
        opening, closing = attrs.get('openingTime'), attrs.get('closingTime')
        if opening and closing and parse_time_label(opening) >= parse_time_label(closing):
            raise serializers.ValidationError({'closingTime': ['Closing time must be after opening time.']})
        if 'closedWeekdays' in attrs:
            attrs['closedWeekdays'] = sorted(set(attrs['closedWeekdays']))
        if 'durations' in attrs:
            attrs['durations'] = sorted(set(attrs['durations']))
        return attrs
