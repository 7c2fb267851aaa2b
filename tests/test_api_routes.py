"""
HTTP API tests.
Exercise the routes through the test client with bearer credentials.
"""

from datetime import timedelta

import pytest


@pytest.fixture
def member_headers(auth_headers, member):
    return auth_headers(member)


@pytest.fixture
def staff_headers(auth_headers, staff):
    return auth_headers(staff)


def _book(client, headers, slot, facility_id=1, **extra):
    body = {'facilityId': facility_id, 'slotId': slot['id']}
    body.update(extra)
    return client.post('/bookings', json=body, headers=headers)


class TestPublicEndpoints:
    """Endpoints reachable without credentials."""

    def test_health(self, client):
        response = client.get('/health')

        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'

    def test_unknown_route(self, client):
        response = client.get('/does-not-exist')

        assert response.status_code == 404
        assert response.get_json()['code'] == 'NotFound'

    def test_requires_credentials(self, client):
        """Protected routes answer 401 JSON instead of redirecting."""
        response = client.get('/facilities')

        assert response.status_code == 401
        assert response.get_json()['code'] == 'Unauthorized'

    def test_rejects_forged_credentials(self, client):
        response = client.get('/facilities', headers={'Authorization': 'Bearer forged.value'})

        assert response.status_code == 401


class TestAuthRoutes:
    """Tests for /auth."""

    def test_register_and_use_token(self, client):
        response = client.post('/auth/register', json={
            'name': 'New Member',
            'email': 'New.Member@Example.org',
            'password': 'longenough'
        })
        assert response.status_code == 201
        data = response.get_json()
        assert data['message']
        assert data['user']['role'] == 'MEMBER'
        assert data['user']['email'] == 'new.member@example.org'

        me = client.get('/auth/me', headers={'Authorization': f"Bearer {data['token']}"})
        assert me.status_code == 200
        assert me.get_json()['user']['name'] == 'New Member'

    def test_register_duplicate_email(self, client, member):
        response = client.post('/auth/register', json={
            'name': 'Again',
            'email': 'member1@example.org',
            'password': 'longenough'
        })

        assert response.status_code == 409
        body = response.get_json()
        assert body['code'] == 'Conflict'
        assert body['message']

    def test_register_invalid_input(self, client):
        response = client.post('/auth/register', json={
            'name': 'Short',
            'email': 'not-an-email',
            'password': 'short'
        })

        assert response.status_code == 422
        body = response.get_json()
        assert body['code'] == 'Validation'
        assert 'email' in body['fields']
        assert 'password' in body['fields']

    def test_login(self, client, app):
        response = client.post('/auth/login', json={
            'email': app.config['ADMIN_EMAIL'],
            'password': app.config['ADMIN_PASSWORD']
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data['user']['role'] == 'STAFF'
        assert data['token']

    def test_login_wrong_password(self, client, member):
        response = client.post('/auth/login', json={
            'email': 'member1@example.org',
            'password': 'wrong-password'
        })

        assert response.status_code == 401
        assert response.get_json()['code'] == 'Unauthorized'


class TestFacilityRoutes:
    """Tests for the facility catalog."""

    def test_list_facilities(self, client, member_headers):
        response = client.get('/facilities', headers=member_headers)

        assert response.status_code == 200
        facilities = response.get_json()
        assert len(facilities) == 4
        assert {f['type'] for f in facilities} >= {'sports'}

    def test_filter_by_category(self, client, member_headers):
        response = client.get('/facilities?category=sports', headers=member_headers)

        data = response.get_json()
        assert [f['name'] for f in data] == ['Indoor Court']

        same = client.get('/facilities?type=sports', headers=member_headers).get_json()
        assert same == data

    def test_unknown_category(self, client, member_headers):
        response = client.get('/facilities?category=pool', headers=member_headers)

        assert response.status_code == 422
        assert response.get_json()['field'] == 'category'

    def test_facility_detail(self, client, member_headers):
        assert client.get('/facilities/2', headers=member_headers).status_code == 200
        assert client.get('/facilities/99', headers=member_headers).status_code == 404

    def test_available_slots(self, client, member_headers, make_slot):
        booked = make_slot()
        free = make_slot()
        _book(client, member_headers, booked)

        response = client.get('/facilities/1/slots', headers=member_headers)
        slots = response.get_json()
        assert [s['id'] for s in slots] == [free['id']]
        assert set(slots[0]) == {'id', 'facilityId', 'startTime', 'endTime', 'status'}
        assert 'T' in slots[0]['startTime']

        response = client.get('/facilities/1/slots?all=1', headers=member_headers)
        assert len(response.get_json()) == 2

    def test_slots_bad_date(self, client, member_headers):
        response = client.get('/facilities/1/slots?date=tomorrow', headers=member_headers)

        assert response.status_code == 422
        assert response.get_json()['field'] == 'date'


class TestBookingRoutes:
    """Tests for member booking routes."""

    def test_create_booking(self, client, member_headers, make_slot):
        slot = make_slot()
        response = _book(client, member_headers, slot, purpose='Study group')

        assert response.status_code == 201
        data = response.get_json()
        assert data['status'] == 'PENDING'
        assert data['purpose'] == 'Study group'
        assert data['qrToken'] is None
        assert data['facility']['type'] == 'lab'
        assert data['slot']['startTime'].startswith(slot['start_time'][:10])
        assert data['createdAt']

    def test_snake_case_body(self, client, member_headers, make_slot):
        slot = make_slot()
        response = client.post('/bookings', json={'facility_id': 1, 'slot_id': slot['id']},
                               headers=member_headers)

        assert response.status_code == 201

    def test_slot_taken(self, client, auth_headers, member, other_member, make_slot):
        slot = make_slot()
        _book(client, auth_headers(member), slot)

        response = _book(client, auth_headers(other_member), slot)

        assert response.status_code == 409
        assert response.get_json()['code'] == 'SlotUnavailable'

    def test_missing_slot_id(self, client, member_headers):
        response = client.post('/bookings', json={'facilityId': 1}, headers=member_headers)

        assert response.status_code == 422
        assert response.get_json()['field'] == 'slotId'

    def test_malformed_json(self, client, member_headers):
        response = client.post('/bookings', data='{not json',
                               content_type='application/json', headers=member_headers)

        assert response.status_code == 422

    def test_unknown_slot(self, client, member_headers):
        response = client.post('/bookings', json={'facilityId': 1, 'slotId': 4242},
                               headers=member_headers)

        assert response.status_code == 404

    def test_my_bookings(self, client, auth_headers, member, other_member, make_slot):
        _book(client, auth_headers(member), make_slot())
        _book(client, auth_headers(other_member), make_slot())

        response = client.get('/bookings/me', headers=auth_headers(member))

        body = response.get_json()
        assert len(body) == 1
        assert body[0]['user']['id'] == member.id

    def test_cancel(self, client, member_headers, make_slot):
        booking = _book(client, member_headers, make_slot()).get_json()

        response = client.delete(f"/bookings/{booking['id']}", headers=member_headers)
        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'CANCELED'
        assert data['cancelledAt']

        again = client.delete(f"/bookings/{booking['id']}", headers=member_headers)
        assert again.status_code == 409
        assert again.get_json()['code'] == 'InvalidTransition'

    def test_cancel_someone_elses(self, client, auth_headers, member, other_member, make_slot):
        booking = _book(client, auth_headers(member), make_slot()).get_json()

        response = client.delete(f"/bookings/{booking['id']}", headers=auth_headers(other_member))

        assert response.status_code == 403

    def test_history(self, client, auth_headers, member, other_member, staff, make_slot):
        booking = _book(client, auth_headers(member), make_slot()).get_json()
        url = f"/bookings/{booking['id']}/history"

        owner = client.get(url, headers=auth_headers(member))
        assert owner.status_code == 200
        assert owner.get_json()[0]['toStatus'] == 'PENDING'

        assert client.get(url, headers=auth_headers(staff)).status_code == 200
        assert client.get(url, headers=auth_headers(other_member)).status_code == 403
        assert client.get('/bookings/4242/history', headers=auth_headers(member)).status_code == 404


class TestStaffRoutes:
    """Tests for approval, check-in and reporting routes."""

    def test_members_are_forbidden(self, client, member_headers):
        assert client.get('/admin/bookings/pending', headers=member_headers).status_code == 403
        assert client.put('/admin/bookings/1/approve', headers=member_headers).status_code == 403
        assert client.post('/checkins/qr', json={'token': 'x'},
                           headers=member_headers).status_code == 403
        assert client.get('/reports/summary', headers=member_headers).status_code == 403

    def test_review_and_checkin(self, client, member_headers, staff_headers, make_slot):
        booking = _book(client, member_headers, make_slot()).get_json()

        pending = client.get('/admin/bookings/pending', headers=staff_headers).get_json()
        assert [b['id'] for b in pending] == [booking['id']]

        approved = client.put(f"/admin/bookings/{booking['id']}/approve", headers=staff_headers)
        assert approved.status_code == 200
        token = approved.get_json()['qrToken']
        assert token

        checkin = client.post('/checkins/qr', json={'qrToken': token}, headers=staff_headers)
        assert checkin.status_code == 200
        body = checkin.get_json()
        assert body['status'] == 'CHECKED_IN'
        assert body['checkedInAt']

        again = client.post('/checkins/qr', json={'token': token}, headers=staff_headers)
        assert again.status_code == 409
        assert again.get_json()['code'] == 'AlreadyCheckedIn'

    def test_reject(self, client, member_headers, staff_headers, make_slot):
        slot = make_slot()
        booking = _book(client, member_headers, slot).get_json()

        response = client.put(f"/admin/bookings/{booking['id']}/reject", headers=staff_headers)
        assert response.status_code == 200
        assert response.get_json()['status'] == 'REJECTED'

        # Slot is free again
        assert _book(client, member_headers, slot).status_code == 201

    def test_approve_unknown(self, client, staff_headers):
        response = client.put('/admin/bookings/4242/approve', headers=staff_headers)

        assert response.status_code == 404

    def test_unknown_token(self, client, staff_headers):
        response = client.post('/checkins/qr', json={'token': 'nobody-has-this'},
                               headers=staff_headers)

        assert response.status_code == 404

    def test_summary(self, client, member_headers, staff_headers, make_slot):
        _book(client, member_headers, make_slot())

        response = client.get('/reports/summary', headers=staff_headers)

        assert response.status_code == 200
        data = response.get_json()
        assert data['totalBookings'] == 1
        assert data['totalApproved'] == 0
        assert data['countsByStatus']['PENDING'] == 1
        assert data['byFacility'][0] == {'facilityId': 1, 'facilityName': 'Chemistry Lab A', 'count': 1}

    def test_wrong_method(self, client, staff_headers):
        response = client.get('/admin/bookings/1/approve', headers=staff_headers)

        assert response.status_code == 405


class TestBookingInputRoutes:
    """Malformed or out-of-time booking requests answer with a JSON error."""

    def test_non_string_purpose(self, client, member_headers, make_slot):
        response = _book(client, member_headers, make_slot(), purpose=42)

        assert response.status_code == 422
        body = response.get_json()
        assert body['field'] == 'purpose'
        assert body['message'] == 'purpose must be a string'

    def test_overlong_purpose(self, client, member_headers, make_slot):
        response = _book(client, member_headers, make_slot(), purpose='x' * 600)

        assert response.status_code == 422
        body = response.get_json()
        assert body['field'] == 'purpose'
        assert body['maxLength'] == 500

    def test_fractional_slot_id(self, client, member_headers, make_slot):
        slot = make_slot()
        response = client.post('/bookings', json={'facilityId': 1, 'slotId': slot['id'] + 0.5},
                               headers=member_headers)

        assert response.status_code == 422
        assert response.get_json()['field'] == 'slotId'

    def test_started_slot(self, app, client, member_headers, make_slot):
        from utils.datetime_helpers import get_now

        with app.app_context():
            now = get_now()
        past = make_slot(start=now - timedelta(hours=3))
        response = _book(client, member_headers, past)

        assert response.status_code == 410
        body = response.get_json()
        assert body['code'] == 'TooLate'
        assert body['startTime'] == past['start_time']

    def test_started_slot_not_listed(self, app, client, member_headers, make_slot):
        from utils.datetime_helpers import get_now

        with app.app_context():
            now = get_now()
        past = make_slot(start=now - timedelta(hours=3))
        future = make_slot()

        listed = client.get('/facilities/1/slots', headers=member_headers).get_json()
        assert [s['id'] for s in listed] == [future['id']]

        everything = client.get('/facilities/1/slots?all=1', headers=member_headers).get_json()
        assert {s['id'] for s in everything} == {past['id'], future['id']}

    def test_non_string_checkin_token(self, client, staff_headers):
        response = client.post('/checkins/qr', json={'qrToken': 12345}, headers=staff_headers)

        assert response.status_code == 422
        assert response.get_json()['field'] == 'qrToken'
