"""
Test the HTTP surface end to end
"""
import json
import pytest


def body(response):
    return json.loads(response.data)


@pytest.fixture
def students(make_profile):
    make_profile('u1', 'Ada')
    make_profile('u2', 'Grace')
    make_profile('u3', 'Linus')


class TestProfileRoutes:

    def test_create_then_read_profile(self, client, auth_headers_for):
        headers = auth_headers_for('new', email='new@university.edu')
        form = {'full_name': 'New Student', 'major': 'History', 'graduation_year': 2028}

        created = client.put('/api/profiles/me', headers=headers, json=form)
        assert created.status_code == 201
        assert body(created)['profile']['email'] == 'new@university.edu'

        updated = client.put('/api/profiles/me', headers=headers, json={'bio': 'Hi'})
        assert updated.status_code == 200

        fetched = body(client.get('/api/profiles/me', headers=headers))
        assert fetched['profile']['full_name'] == 'New Student'
        assert fetched['profile']['bio'] == 'Hi'

    def test_missing_required_field(self, client, auth_headers_for):
        response = client.put('/api/profiles/me', headers=auth_headers_for('new'), json={'full_name': 'X'})
        assert response.status_code == 400
        assert 'major' in body(response)['error']

    def test_interests(self, client, students, auth_headers_for):
        response = client.put('/api/profiles/me/interests', headers=auth_headers_for('u1'),
                              json={'interests': ['Finance', 'Finance', 'Remote']})
        assert body(response)['interests'] == ['Finance', 'Remote']

    def test_people_with_connection_status(self, client, students, auth_headers_for):
        client.post('/api/connections/', headers=auth_headers_for('u1'), json={'receiver_id': 'u2'})

        response = client.get('/api/profiles/people', headers=auth_headers_for('u1'))
        data = body(response)

        statuses = {p['id']: p['connection_status'] for p in data['people']}
        assert statuses == {'u2': 'pending', 'u3': 'none'}
        assert data['pagination']['total'] == 2

        from_other_side = body(client.get('/api/profiles/people', headers=auth_headers_for('u2')))
        assert {p['id']: p['connection_status'] for p in from_other_side['people']}['u1'] == 'pending'


class TestSocialFlow:

    def test_connect_chat_and_read(self, client, students, auth_headers_for):
        ada, grace = auth_headers_for('u1'), auth_headers_for('u2')

        requested = client.post('/api/connections/', headers=ada, json={'receiver_id': 'u2'})
        assert requested.status_code == 201
        connection_id = body(requested)['connection']['id']

        pending = body(client.get('/api/connections/pending', headers=grace))
        assert [r['id'] for r in pending['requests']] == [connection_id]
        assert pending['requests'][0]['other_user']['full_name'] == 'Ada'

        # Only the receiver may answer
        assert client.put(f'/api/connections/{connection_id}', headers=ada,
                          json={'response': 'accepted'}).status_code == 403
        accepted = client.put(f'/api/connections/{connection_id}', headers=grace, json={'response': 'accepted'})
        assert body(accepted)['connection']['status'] == 'accepted'

        opened = client.post('/api/conversations/', headers=ada, json={'user_id': 'u2'})
        assert opened.status_code == 201
        conversation_id = body(opened)['conversation']['id']

        reopened = client.post('/api/conversations/', headers=grace, json={'user_id': 'u1'})
        assert reopened.status_code == 200
        assert body(reopened)['conversation']['id'] == conversation_id

        url = f'/api/conversations/{conversation_id}/messages'
        assert client.post(url, headers=ada, json={'content': 'Hello!'}).status_code == 201
        assert client.post(url, headers=ada, json={'content': '   '}).status_code == 400

        listing = body(client.get('/api/conversations/', headers=grace))['conversations']
        assert listing[0]['other_user']['full_name'] == 'Ada'
        assert listing[0]['last_message']['content'] == 'Hello!'
        assert listing[0]['unread_count'] == 1
        assert body(client.get('/api/conversations/unread-count', headers=grace))['unread_count'] == 1

        messages = body(client.get(url, headers=grace))['messages']
        assert [m['content'] for m in messages] == ['Hello!']

        assert body(client.put(f'/api/conversations/{conversation_id}/read', headers=grace))['marked_read'] == 1
        assert body(client.get('/api/conversations/unread-count', headers=grace))['unread_count'] == 0

        # Linus is not part of this conversation
        assert client.get(url, headers=auth_headers_for('u3')).status_code == 403

    def test_conversation_requires_connection(self, client, students, auth_headers_for):
        response = client.post('/api/conversations/', headers=auth_headers_for('u1'), json={'user_id': 'u3'})
        assert response.status_code == 403

    def test_duplicate_request_conflicts(self, client, students, auth_headers_for):
        client.post('/api/connections/', headers=auth_headers_for('u1'), json={'receiver_id': 'u2'})
        response = client.post('/api/connections/', headers=auth_headers_for('u2'), json={'receiver_id': 'u1'})
        assert response.status_code == 409

    def test_unknown_connection(self, client, students, auth_headers_for):
        response = client.put('/api/connections/999', headers=auth_headers_for('u1'), json={'response': 'accepted'})
        assert response.status_code == 404

    def test_stream_unavailable_without_realtime(self, client, students, connect, auth_headers_for):
        connect('u1', 'u2')
        conversation_id = body(client.post('/api/conversations/', headers=auth_headers_for('u1'),
                                           json={'user_id': 'u2'}))['conversation']['id']

        response = client.get(f'/api/conversations/{conversation_id}/stream', headers=auth_headers_for('u1'))
        assert response.status_code == 503


class TestJobRoutes:

    def test_post_apply_and_review(self, client, students, auth_headers_for):
        poster, applicant = auth_headers_for('u1'), auth_headers_for('u2')

        created = client.post('/api/jobs/', headers=poster, json={'title': 'Analyst Intern', 'company': 'Acme'})
        assert created.status_code == 201
        job_id = body(created)['job']['id']

        applied = client.post(f'/api/jobs/{job_id}/applications', headers=applicant,
                              json={'cover_letter': 'Pick me'})
        assert applied.status_code == 201
        application_id = body(applied)['application']['id']

        assert client.post(f'/api/jobs/{job_id}/applications', headers=applicant, json={}).status_code == 409
        assert client.get(f'/api/jobs/{job_id}/applications', headers=applicant).status_code == 403

        applications = body(client.get(f'/api/jobs/{job_id}/applications', headers=poster))['applications']
        assert applications[0]['applicant']['full_name'] == 'Grace'

        reviewed = client.put(f'/api/jobs/applications/{application_id}', headers=poster,
                              json={'status': 'reviewed'})
        assert body(reviewed)['application']['status'] == 'reviewed'

        jobs = body(client.get('/api/jobs/', headers=applicant))['jobs']
        assert jobs[0]['user_applied'] is True


class TestNotificationRoutes:

    def test_inbox_flow(self, client, students, auth_headers_for):
        grace = auth_headers_for('u2')
        client.post('/api/connections/', headers=auth_headers_for('u1'), json={'receiver_id': 'u2'})
        client.post('/api/connections/', headers=auth_headers_for('u3'), json={'receiver_id': 'u2'})

        inbox = body(client.get('/api/notifications/', headers=grace))
        assert inbox['unread_count'] == 2
        assert sorted(n['message'] for n in inbox['notifications']) == [
            'Ada wants to connect with you', 'Linus wants to connect with you'
        ]

        first_id = inbox['notifications'][0]['id']
        assert client.put(f'/api/notifications/{first_id}/read', headers=auth_headers_for('u1')).status_code == 404
        assert client.put(f'/api/notifications/{first_id}/read', headers=grace).status_code == 200
        assert body(client.get('/api/notifications/unread-count', headers=grace))['unread_count'] == 1

        assert body(client.put('/api/notifications/mark-all-read', headers=grace))['updated'] == 1
        assert body(client.get('/api/notifications/?unread_only=true', headers=grace))['notifications'] == []


class TestHealth:

    def test_health(self, client):
        response = client.get('/api/health')
        assert response.status_code == 200
        assert body(response)['status'] == 'healthy'

    def test_metrics(self, client):
        client.get('/api/health')
        response = client.get('/api/health/metrics')
        assert response.status_code == 200
        assert isinstance(body(response), dict)

    def test_unknown_route_is_json(self, client):
        response = client.get('/api/nowhere')
        assert response.status_code == 404
        assert 'error' in body(response)
