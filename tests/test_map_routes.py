"""
HTTP tests for the map page, the records/basemap APIs and the admin browser.
"""

from services.store_service import StoreService


class TestMapPage:
    def test_renders_with_existing_markers(self, client, make_record):
        make_record(id='seeded-1')
        make_record(id='seeded-2')

        response = client.get('/')

        assert response.status_code == 200
        body = response.get_data(as_text=True)
        assert 'window.MAP_CONFIG' in body
        assert 'seeded-1' in body
        assert 'seeded-2' in body
        assert 'capture-modal' in body

    def test_renders_with_empty_store(self, client):
        response = client.get('/')
        assert response.status_code == 200
        assert 'markers: []' in response.get_data(as_text=True)

    def test_page_lists_all_basemaps(self, client):
        body = client.get('/').get_data(as_text=True)
        for key in ('OpenStreetMap', 'Esri.WorldImagery', 'CartoDB.Positron', 'OpenTopoMap'):
            assert key in body

    def test_security_headers(self, client):
        response = client.get('/')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'


class TestRecordsApi:
    def test_lists_records_and_markers(self, client, make_record):
        make_record(id='r1', value=120000.0, surface_area=300.0)

        data = client.get('/api/records').get_json()

        assert data['count'] == 1
        assert data['records'][0]['id'] == 'r1'
        assert data['markers'][0]['id'] == 'r1'
        assert '$120.000' in data['markers'][0]['popup']

    def test_record_without_coordinates_has_no_marker(self, client, make_record):
        make_record(id='placed')
        make_record(id='unplaced', latitude=None)

        data = client.get('/api/records').get_json()

        assert data['count'] == 2
        assert [m['id'] for m in data['markers']] == ['placed']
        assert client.get('/').status_code == 200

    def test_health(self, client, make_record):
        make_record()
        assert client.get('/health').get_json() == {'status': 'ok', 'records': 1}


class TestBasemapSwitch:
    def test_defaults_to_openstreetmap(self, client):
        data = client.get('/api/basemaps').get_json()
        assert data['selected'] == 'OpenStreetMap'
        assert len(data['basemaps']) == 4

    def test_selection_is_remembered(self, client):
        response = client.post('/map/basemap', json={'basemap': 'OpenTopoMap'})

        assert response.status_code == 200
        assert response.get_json()['key'] == 'OpenTopoMap'
        assert client.get('/api/basemaps').get_json()['selected'] == 'OpenTopoMap'

    def test_unknown_basemap_is_404(self, client):
        response = client.post('/map/basemap', json={'basemap': 'Nope'})
        assert response.status_code == 404
        assert 'error' in response.get_json()

    def test_switching_leaves_markers_and_rows_alone(self, client, make_record):
        make_record(id='a')
        make_record(id='b')
        before = client.get('/api/records').get_json()

        for key in ('Esri.WorldImagery', 'CartoDB.Positron', 'OpenTopoMap', 'OpenStreetMap'):
            client.post('/map/basemap', json={'basemap': key})

        after = client.get('/api/records').get_json()
        assert after['markers'] == before['markers']
        assert StoreService.count() == 2

    def test_switching_keeps_pending_click(self, client):
        client.post('/capture/click', json={'latitude': 1.0, 'longitude': 2.0})
        client.post('/map/basemap', json={'basemap': 'Esri.WorldImagery'})

        with client.session_transaction() as sess:
            assert sess['pending_click']['latitude'] == 1.0


class TestErrors:
    def test_unknown_api_path_returns_json_404(self, client):
        response = client.get('/api/nothing-here')
        assert response.status_code == 404
        assert response.get_json() == {'error': 'Not found'}

    def test_unknown_page_returns_html_404(self, client):
        response = client.get('/nothing-here')
        assert response.status_code == 404
        assert 'Page not found' in response.get_data(as_text=True)


class TestAdminPanel:
    def test_records_browser_lists_rows(self, client, make_record):
        make_record(id='visible-in-admin')

        response = client.get('/admin/admin_valuerecord/')

        assert response.status_code == 200
        assert 'visible-in-admin' in response.get_data(as_text=True)

    def test_records_browser_is_read_only(self, client, make_record):
        make_record(id='protected')

        client.post('/admin/admin_valuerecord/delete/', data={'id': 'protected'})

        assert StoreService.count() == 1
