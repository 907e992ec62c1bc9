"""
Tests for API endpoints
"""
import io
import pytest

from exceptions import PersistenceException


def add_person(client, firstname, lastname, tags=()):
    response = client.post('/api/people', json={'firstname': firstname, 'lastname': lastname, 'tags': list(tags)})
    assert response.status_code == 201
    return response.get_json()['data']


@pytest.fixture
def seeded(client):
    """Alice (vip, paris), Bob (paris), Carol (london) created through the API"""
    return {
        'alice': add_person(client, 'Alice', 'Martin', ['vip', 'paris']),
        'bob': add_person(client, 'Bob', 'Durand', ['paris']),
        'carol': add_person(client, 'Carol', 'Smith', ['london']),
    }


class TestSystemEndpoints:
    """Tests for health, stats and metrics"""

    def test_health_returns_healthy(self, client):
        response = client.get('/api/health')
        data = response.get_json()

        assert response.status_code == 200
        assert data['success'] is True
        assert data['data']['status'] == 'healthy'
        assert data['data']['checks']['database'] == 'ok'

    def test_stats(self, client, seeded):
        data = client.get('/api/stats').get_json()['data']

        assert data['people'] == 3
        assert data['tags'] == 3
        assert data['tags_per_category'] == {'Uncategorized': 3}
        assert data['solicitations'] == 0

    def test_metrics(self, client, seeded):
        response = client.get('/api/metrics')

        assert response.status_code == 200
        assert b'atcreator_people_total 3.0' in response.data

    def test_set_auth_settings(self, client):
        response = client.post('/api/settings/auth', json={'login_rate_limit': '5 per minute'})

        assert response.status_code == 200
        assert response.get_json()['data']['login_rate_limit'] == '5 per minute'
        data = client.get('/api/settings').get_json()['data']
        assert data['auth']['login_rate_limit'] == '5 per minute'

    @pytest.mark.parametrize('value', [5, '', 'often'])
    def test_set_auth_settings_rejects_bad_limit(self, client, value):
        response = client.post('/api/settings/auth', json={'login_rate_limit': value})
        data = response.get_json()

        assert response.status_code == 400
        assert data['details']['errors'][0]['path'] == 'auth/login_rate_limit'
        settings = client.get('/api/settings').get_json()['data']
        assert settings['auth']['login_rate_limit'] == '20 per minute'


class TestPeopleEndpoints:
    """Tests for /api/people"""

    def test_list_people_newest_first(self, client, seeded):
        data = client.get('/api/people').get_json()['data']
        assert [p['firstname'] for p in data] == ['Carol', 'Bob', 'Alice']

    def test_add_person_validation(self, client):
        response = client.post('/api/people', json={'firstname': '  ', 'lastname': 'Martin'})
        data = response.get_json()

        assert response.status_code == 400
        assert data['code'] == 'VALIDATION_ERROR'
        assert data['details'] == {'field': 'firstname'}

    def test_get_unknown_person(self, client):
        response = client.get('/api/people/42')
        assert response.status_code == 404
        assert response.get_json()['code'] == 'NOT_FOUND'

    def test_update_person(self, client, seeded):
        response = client.put(
            f"/api/people/{seeded['bob']['id']}",
            json={'firstname': 'Robert', 'lastname': 'Durand', 'tags': ['london', 'cto']},
        )
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['firstname'] == 'Robert'
        assert data['tags'] == ['cto', 'london']

    def test_delete_person_twice(self, client, seeded):
        url = f"/api/people/{seeded['carol']['id']}"

        assert client.delete(url).get_json()['data'] == {'deleted': 1}
        assert client.delete(url).get_json()['data'] == {'deleted': 0}

    def test_delete_many(self, client, seeded):
        response = client.post('/api/people/delete', json={'ids': [seeded['alice']['id'], seeded['bob']['id'], 99]})

        assert response.get_json()['data'] == {'deleted': 2}
        assert len(client.get('/api/people').get_json()['data']) == 1

    def test_delete_many_needs_list(self, client):
        response = client.post('/api/people/delete', json={'ids': 3})
        assert response.status_code == 400

    def test_import_json(self, client, seeded):
        response = client.post(
            '/api/people/import',
            json={'people': [{'firstname': 'alice', 'lastname': 'martin'}, {'firstname': 'Grace', 'lastname': 'Hopper'}]},
        )
        data = response.get_json()['data']

        assert data['added'] == 1
        assert data['duplicates'] == 1
        assert data['people'][0]['firstname'] == 'Grace'

    def test_import_csv(self, client):
        response = client.post(
            '/api/people/import',
            data={'file': (io.BytesIO(b'Jean,Dupont\njean, dupont \nAda,Lovelace\n'), 'people.csv')},
            content_type='multipart/form-data',
        )
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['added'] == 2
        assert data['duplicates'] == 1


class TestTagEndpoints:
    """Tests for /api/tags"""

    def test_list_tags_with_usage(self, client, seeded):
        data = client.get('/api/tags').get_json()['data']
        usage = {t['name']: t['people'] for t in data}
        assert usage == {'london': 1, 'paris': 2, 'vip': 1}

    def test_grouped_tags(self, client, seeded):
        client.put('/api/tags/london', json={'category': 'City'})

        data = client.get('/api/tags?grouped=1').get_json()['data']

        assert data[0]['category'] == 'City'
        assert [t['name'] for t in data[0]['tags']] == ['london']
        assert data[-1]['category'] == 'Uncategorized'

    def test_categories(self, client):
        data = client.get('/api/tags/categories').get_json()['data']
        assert data[0] == 'City'
        assert data[-1] == 'Uncategorized'

    def test_create_duplicate(self, client):
        assert client.post('/api/tags', json={'name': 'VIP'}).status_code == 201

        response = client.post('/api/tags', json={'name': 'vip'})
        assert response.status_code == 409
        assert response.get_json()['code'] == 'CONFLICT'

    def test_create_duplicate_with_ensure(self, client):
        client.post('/api/tags', json={'name': 'VIP'})

        response = client.post('/api/tags?ensure=1', json={'name': 'vip'})

        assert response.status_code == 200
        assert response.get_json()['data']['name'] == 'VIP'

    def test_update_tag(self, client, seeded):
        response = client.put('/api/tags/paris', json={'name': 'Paris', 'category': 'City', 'is_priority': True})
        data = response.get_json()['data']

        assert data == {'id': data['id'], 'name': 'Paris', 'category': 'City', 'is_priority': True}
        bob = client.get(f"/api/people/{seeded['bob']['id']}").get_json()['data']
        assert bob['tags'] == ['Paris']

    def test_update_tag_bad_category_changes_nothing(self, client, seeded):
        response = client.put('/api/tags/paris', json={'name': 'Paris', 'category': 'Moon'})

        assert response.status_code == 400
        names = [t['name'] for t in client.get('/api/tags').get_json()['data']]
        assert 'paris' in names

    def test_delete_tag(self, client, seeded):
        response = client.delete('/api/tags/paris')

        assert response.get_json()['data']['people'] == 2
        people = client.get('/api/people').get_json()['data']
        assert all('paris' not in p['tags'] for p in people)

    def test_delete_unknown_tag(self, client):
        assert client.delete('/api/tags/ghost').status_code == 404


class TestGenerationEndpoints:
    """Tests for /api/generation"""

    def test_initial_state_is_empty(self, client, seeded):
        data = client.get('/api/generation').get_json()['data']

        assert data['people'] == []
        assert data['handles'] == ''
        assert {t['state'] for t in data['tags']} == {'neutral'}

    def test_toggle_tag_cycles(self, client, seeded):
        states = [
            client.post('/api/generation/tags/paris/toggle').get_json()['message']
            for _ in range(3)
        ]
        assert states == ['paris: include', 'paris: exclude', 'paris: neutral']

    def test_toggle_uses_stored_tag_name(self, client, seeded):
        data = client.post('/api/generation/tags/PARIS/toggle').get_json()['data']
        assert data['filter']['tag_states'] == {'paris': 'include'}

    def test_toggle_non_ascii_tag(self, client):
        add_person(client, 'Ada', 'Lovelace', ['Évry'])
        add_person(client, 'Grace', 'Hopper', ['Évry'])

        response = client.post('/api/generation/tags/%C3%A9vry/toggle')
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['filter']['tag_states'] == {'Évry': 'include'}
        assert data['handles'] == '@Grace Hopper @Ada Lovelace'

    def test_filter_follows_renamed_tag(self, client, seeded):
        client.post('/api/generation/tags/paris/toggle', json={'state': 'include'})
        client.post(f"/api/generation/selection/toggle/{seeded['bob']['id']}")

        client.put('/api/tags/paris', json={'name': 'Paris-IDF'})
        data = client.get('/api/generation').get_json()['data']

        assert [p['firstname'] for p in data['people']] == ['Bob', 'Alice']
        assert data['filter']['tag_states'] == {'Paris-IDF': 'include'}
        assert {t['name']: t['state'] for t in data['tags']}['Paris-IDF'] == 'include'
        assert data['selection'] == [seeded['bob']['id']]

    def test_filter_forgets_deleted_tag(self, client, seeded):
        client.post('/api/generation/tags/vip/toggle', json={'state': 'include'})
        client.post('/api/generation/tags/paris/toggle', json={'state': 'include'})
        client.post(f"/api/generation/selection/toggle/{seeded['alice']['id']}")

        client.delete('/api/tags/paris')
        data = client.get('/api/generation').get_json()['data']

        assert data['filter']['tag_states'] == {'vip': 'include'}
        assert [p['firstname'] for p in data['people']] == ['Alice']
        assert data['selection'] == []

    def test_filter_empty_after_only_included_tag_deleted(self, client, seeded):
        client.post('/api/generation/tags/paris/toggle')

        client.delete('/api/tags/paris')
        data = client.get('/api/generation').get_json()['data']

        assert data['filter']['tag_states'] == {}
        assert data['people'] == []
        assert {t['state'] for t in data['tags']} == {'neutral'}

    def test_filters(self, client, seeded):
        client.post('/api/generation/tags/paris/toggle')
        data = client.get('/api/generation').get_json()['data']
        assert data['handles'] == '@Bob Durand @Alice Martin'

        data = client.post('/api/generation/tags/vip/toggle', json={'state': 'exclude'}).get_json()['data']
        assert data['handles'] == '@Bob Durand'

        data = client.post('/api/generation/reset').get_json()['data']
        assert data['people'] == []

    def test_bad_filter_value(self, client, seeded):
        response = client.post('/api/generation/filters', json={'max_solicitations': -2})
        assert response.status_code == 400

    def test_filter_change_clears_selection(self, client, seeded):
        client.post('/api/generation/tags/paris/toggle')
        data = client.post('/api/generation/selection/all').get_json()['data']
        assert sorted(data['selection']) == sorted([seeded['alice']['id'], seeded['bob']['id']])

        data = client.post('/api/generation/filters', json={'max_solicitations': 1}).get_json()['data']
        assert data['selection'] == []

    def test_selection_handles(self, client, seeded):
        client.post(f"/api/generation/selection/toggle/{seeded['carol']['id']}")
        client.post(f"/api/generation/selection/toggle/{seeded['alice']['id']}")

        data = client.get('/api/generation/selection/handles').get_json()['data']

        assert data['handles'] == '@Carol Smith @Alice Martin'

    def test_toggle_unknown_person(self, client):
        assert client.post('/api/generation/selection/toggle/77').status_code == 404

    def test_delete_selection(self, client, seeded):
        client.post(f"/api/generation/selection/toggle/{seeded['carol']['id']}")

        data = client.post('/api/generation/selection/delete').get_json()['data']

        assert data['selection'] == []
        assert len(client.get('/api/people').get_json()['data']) == 2

    def test_bulk_tags_from_working_set(self, client, seeded):
        client.post('/api/generation/tags/paris/toggle')
        client.post('/api/generation/selection/all')
        client.post('/api/generation/working-set/toggle/speaker')

        response = client.post('/api/generation/bulk-tags', json={'mode': 'add'})
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['result']['tags'] == ['speaker']
        assert data['selection'] == []
        assert data['working_set'] == []
        bob = client.get(f"/api/people/{seeded['bob']['id']}").get_json()['data']
        assert bob['tags'] == ['paris', 'speaker']

    def test_bulk_tags_without_selection(self, client, seeded):
        response = client.post('/api/generation/bulk-tags', json={'mode': 'add', 'tags': ['vip']})
        assert response.status_code == 400

    def test_copy_records_solicitation(self, client, seeded):
        client.post('/api/generation/tags/vip/toggle')

        data = client.post('/api/generation/copy').get_json()['data']

        assert data == {'text': '@Alice Martin', 'count': 1, 'solicitation_recorded': True}
        alice = client.get(f"/api/people/{seeded['alice']['id']}").get_json()['data']
        assert alice['solicitation_count'] == 1
        assert alice['last_solicitation_date'] is not None

        data = client.post('/api/generation/filters', json={'max_solicitations': 0}).get_json()['data']
        assert data['people'] == []

    def test_copy_selection(self, client, seeded):
        client.post(f"/api/generation/selection/toggle/{seeded['bob']['id']}")

        data = client.post('/api/generation/copy', json={'source': 'selection'}).get_json()['data']

        assert data['text'] == '@Bob Durand'

    def test_copy_without_recording(self, client, seeded):
        client.post('/api/settings/generation', json={'record_solicitations': False})
        client.post('/api/generation/tags/vip/toggle')

        data = client.post('/api/generation/copy').get_json()['data']

        assert data['text'] == '@Alice Martin'
        assert data['solicitation_recorded'] is False
        alice = client.get(f"/api/people/{seeded['alice']['id']}").get_json()['data']
        assert alice['solicitation_count'] == 0

    def test_copy_when_recording_fails(self, app, client, seeded, monkeypatch):
        def failing_record(ids, when=None):
            raise PersistenceException('database is locked')

        monkeypatch.setattr(app.contacts.people, 'record_solicitation', failing_record)
        client.post('/api/generation/tags/paris/toggle')

        response = client.post('/api/generation/copy')
        data = response.get_json()['data']

        assert response.status_code == 200
        assert data['text'] == '@Bob Durand @Alice Martin'
        assert data['solicitation_recorded'] is False
