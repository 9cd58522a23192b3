"""
Integration tests for the front-desk scheduling API.

These go through the URL router, serializers, permissions and the
exception handler, using DRF's APIClient inside ``APITestCase``. Bookings
are made for tomorrow so the real clock never makes them elapse.
"""
from datetime import timedelta

from django.core.cache import cache
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import Appointment, AppointmentSettings, Patient, User


class SchedulingAPITests(APITestCase):
    def setUp(self) -> None:
        # throttle counters live in the cache
        cache.clear()
        self.reception = User.objects.create_user(username="desk1", password="deskpass1", role="reception")
        self.admin_user = User.objects.create_user(username="admin1", password="adminpass1", role="admin")
        self.patient = Patient.objects.create(name="Asha Verma", phone="9000000001", visible_id="P-0001")
        self.other = Patient.objects.create(name="Rahul Mehta", phone="9000000002", visible_id="P-0002")
        self.tomorrow = timezone.localdate() + timedelta(days=1)
        self.client = APIClient()
        self.client.force_authenticate(user=self.reception)

    def _book(self, time_label, patient=None, **extra):
        body = {
            'patientId': (patient or self.patient).id,
            'date': self.tomorrow.isoformat(),
            'time': time_label,
            **extra,
        }
        return self.client.post('/api/appointments', body, format='json')

    def test_requires_authentication(self) -> None:
        anon = APIClient()
        resp = anon.get('/api/appointments')
        self.assertEqual(resp.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertFalse(resp.data['ok'])
        self.assertEqual(resp.data['error']['code'], 'not_authenticated')

    def test_login_returns_tokens(self) -> None:
        anon = APIClient()
        resp = anon.post(reverse('login_view'), {'username': 'desk1', 'password': 'deskpass1'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['role'], 'reception')
        anon.credentials(HTTP_AUTHORIZATION=f"Token {resp.data['token']}")
        self.assertEqual(anon.get('/api/appointments').status_code, status.HTTP_200_OK)

        bad = APIClient().post(reverse('login_view'), {'username': 'desk1', 'password': 'nope'}, format='json')
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)

    def test_create_and_read_back(self) -> None:
        resp = self._book('10:00 am', type='Follow-up')
        self.assertEqual(resp.status_code, status.HTTP_201_CREATED)
        created = resp.data['appointment']
        self.assertEqual(created['time'], '10:00 AM')
        self.assertEqual(created['patientName'], 'Asha Verma')
        self.assertEqual(created['status'], 'Pending')

        detail = self.client.get(f"/api/appointments/{created['id']}")
        self.assertEqual(detail.status_code, status.HTTP_200_OK)
        self.assertEqual(detail.data['appointment']['type'], 'Follow-up')

        listing = self.client.get('/api/appointments', {'date': self.tomorrow.isoformat()})
        self.assertEqual(listing.data['total'], 1)

    def test_double_booking_is_conflict(self) -> None:
        self.assertEqual(self._book('10:00 AM').status_code, status.HTTP_201_CREATED)
        resp = self._book('10:00 AM', patient=self.other)
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertEqual(resp.data['error']['code'], 'slot_already_booked')
        self.assertIn('Asha Verma', resp.data['error']['message'])
        self.assertEqual(Appointment.objects.count(), 1)

    def test_create_errors(self) -> None:
        resp = self._book('10:00 AM', date=(self.tomorrow - timedelta(days=2)).isoformat())
        self.assertEqual(resp.data['error']['code'], 'past_slot')

        resp = self.client.post('/api/appointments', {'patientId': self.patient.id}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data['error']['code'], 'missing_fields')

        resp = self._book('half past ten')
        self.assertEqual(resp.data['error']['code'], 'invalid_time')

        resp = self.client.post('/api/appointments', {
            'patientPhone': '0000', 'date': self.tomorrow.isoformat(), 'time': '10:00 AM',
        }, format='json')
        self.assertEqual(resp.data['error']['code'], 'patient_not_found')
        self.assertEqual(Appointment.objects.count(), 0)

    def test_slots_reflect_bookings(self) -> None:
        self._book('10:00 AM', duration=60)
        resp = self.client.get('/api/appointments/slots', {'date': self.tomorrow.isoformat()})
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['booked'], ['10:00 AM', '10:30 AM'])
        self.assertIn('9:00 AM', resp.data['available'])

        missing = self.client.get('/api/appointments/slots')
        self.assertEqual(missing.status_code, status.HTTP_400_BAD_REQUEST)

    def test_booking_window(self) -> None:
        resp = self.client.get('/api/appointments/booking-window', {'date': self.tomorrow.isoformat()})
        self.assertTrue(resp.data['withinWindow'])
        far = (self.tomorrow + timedelta(days=60)).isoformat()
        self.assertFalse(self.client.get('/api/appointments/booking-window', {'date': far}).data['withinWindow'])

    def test_reschedule_and_swap(self) -> None:
        x = self._book('10:00 AM').data['appointment']
        y = self._book('11:00 AM', patient=self.other).data['appointment']

        resp = self.client.post(f"/api/appointments/{x['id']}/reschedule",
                                {'newDate': self.tomorrow.isoformat(), 'newTime': '2:00 PM'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['appointment']['time'], '2:00 PM')

        resp = self.client.post(f"/api/appointments/{x['id']}/reschedule",
                                {'newDate': self.tomorrow.isoformat(), 'newTime': '11:00 AM'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_409_CONFLICT)
        self.assertIn('Rahul Mehta', resp.data['error']['message'])

        resp = self.client.post('/api/appointments/swap', {'id1': x['id'], 'id2': y['id']}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(Appointment.objects.get(pk=x['id']).time, '11:00 AM')
        self.assertEqual(Appointment.objects.get(pk=y['id']).time, '2:00 PM')

        resp = self.client.post('/api/appointments/swap', {'id1': x['id']}, format='json')
        self.assertEqual(resp.data['error']['code'], 'missing_fields')

    def test_status_flow_and_locked_reschedule(self) -> None:
        appt = self._book('10:00 AM').data['appointment']
        url = f"/api/appointments/{appt['id']}/status"
        for new_status in ('Confirmed', 'In Progress', 'Completed'):
            resp = self.client.patch(url, {'status': new_status}, format='json')
            self.assertEqual(resp.status_code, status.HTTP_200_OK)
            self.assertEqual(resp.data['appointment']['status'], new_status)

        resp = self.client.patch(url, {'status': 'Pending'}, format='json')
        self.assertEqual(resp.data['error']['code'], 'invalid_transition')

        resp = self.client.post(f"/api/appointments/{appt['id']}/reschedule",
                                {'newDate': self.tomorrow.isoformat(), 'newTime': '3:00 PM'}, format='json')
        self.assertEqual(resp.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(resp.data['error']['code'], 'not_reschedulable')

    def test_update_and_delete(self) -> None:
        appt = self._book('10:00 AM').data['appointment']
        resp = self.client.put(f"/api/appointments/{appt['id']}", {'notes': 'wheelchair'}, format='json')
        self.assertEqual(resp.data['appointment']['notes'], 'wheelchair')

        self.assertEqual(self.client.delete(f"/api/appointments/{appt['id']}").status_code,
                         status.HTTP_204_NO_CONTENT)
        resp = self.client.get(f"/api/appointments/{appt['id']}")
        self.assertEqual(resp.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(resp.data['error']['code'], 'not_found')

    def test_patient_search_by_phone(self) -> None:
        resp = self.client.get('/api/patients/search/by-phone', {'phone': '900000000'})
        self.assertEqual([p['name'] for p in resp.data['results']], ['Asha Verma', 'Rahul Mehta'])
        self.assertEqual(self.client.get('/api/patients/search/by-phone').status_code,
                         status.HTTP_400_BAD_REQUEST)

    def test_settings_admin_only_update(self) -> None:
        resp = self.client.get('/api/settings/appointments')
        self.assertEqual(resp.data['settings']['slotMinutes'], 30)

        body = {'timeSlots': [{'time': '9:00 am'}, {'time': '9:30 AM', 'active': False}], 'slotMinutes': 30}
        denied = self.client.post('/api/settings/appointments', body, format='json')
        self.assertEqual(denied.status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(user=self.admin_user)
        resp = self.client.post('/api/settings/appointments', body, format='json')
        self.assertEqual(resp.status_code, status.HTTP_200_OK)
        self.assertEqual(resp.data['settings']['timeSlots'][0], {'time': '9:00 AM', 'active': True})
        self.assertEqual(AppointmentSettings.load().time_slots[1]['active'], False)

        slots = self.client.get('/api/appointments/slots', {'date': self.tomorrow.isoformat()})
        self.assertEqual([s['time'] for s in slots.data['slots']], ['9:00 AM'])

        bad = self.client.post('/api/settings/appointments',
                               {'openingTime': '5:00 PM', 'closingTime': '9:00 AM'}, format='json')
        self.assertEqual(bad.status_code, status.HTTP_400_BAD_REQUEST)

    def test_healthz(self) -> None:
        resp = APIClient().get('/healthz')
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.json()['ok'])
