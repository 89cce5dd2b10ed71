"""
Tests for the Folio API server.

Each test gets a fresh SQLite database and upload directory; image files are
generated with Pillow so layout requests resolve real dimensions.

Run: python3 -m pytest test_api.py -v
"""

import os
import sys
import tempfile
import unittest
from unittest.mock import patch

_script_dir = os.path.dirname(os.path.abspath(__file__))
if _script_dir not in sys.path:
    sys.path.insert(0, _script_dir)

from fastapi.testclient import TestClient
from PIL import Image

from api import create_app
from api import config as api_config
from api.routers.layout import clear_layout_caches


class ApiTestCase(unittest.TestCase):
    """Fresh database, upload dir and client per test."""

    password = ''

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.upload_dir = os.path.join(self._tmp.name, 'uploads')
        os.makedirs(self.upload_dir)
        for name, size in [('landscape.png', (300, 200)), ('portrait.png', (200, 300)),
                           ('square.png', (250, 250))]:
            Image.new('RGB', size, (90, 90, 90)).save(os.path.join(self.upload_dir, name))

        self._patches = [
            patch.dict(os.environ, {'DB_PATH': os.path.join(self._tmp.name, 'folio.db')}),
            patch.dict(api_config.SITE_CONFIG, {'password': self.password,
                                                'upload_dir': self.upload_dir}),
        ]
        for p in self._patches:
            p.start()
        clear_layout_caches()

        self.client = TestClient(create_app())
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        for p in reversed(self._patches):
            p.stop()
        clear_layout_caches()
        self._tmp.cleanup()

    def create(self, **fields):
        response = self.client.post('/api/images', json=fields)
        self.assertEqual(response.status_code, 201, response.text)
        return response.json()


# ============================================
# TIER 1: Image CRUD
# ============================================

class TestImages(ApiTestCase):

    def test_create_and_get(self):
        image = self.create(url='/uploads/landscape.png', alt='Dunes', order=1)
        self.assertTrue(image['id'])
        self.assertEqual(image['alt'], 'Dunes')
        self.assertFalse(image['featured'])

        response = self.client.get(f"/api/images/{image['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['url'], '/uploads/landscape.png')

    def test_create_accepts_camel_case_fields(self):
        image = self.create(url='/uploads/portrait.png', mobileRowType='1:1-9:16',
                            mobileRowOrder=2, mobilePosition=1, aspectRatio='9:16')
        self.assertEqual(image['mobile_row_type'], '1:1-9:16')
        self.assertEqual(image['mobile_row_order'], 2)
        self.assertEqual(image['mobile_position'], 1)
        self.assertEqual(image['aspect_ratio'], '9:16')

    def test_create_without_url(self):
        response = self.client.post('/api/images', json={'alt': 'no url'})
        self.assertEqual(response.status_code, 400)

    def test_create_rejects_unknown_row_type(self):
        response = self.client.post('/api/images', json={'url': '/x.png', 'mobile_row_type': '4:3'})
        self.assertEqual(response.status_code, 422)

    def test_get_unknown(self):
        self.assertEqual(self.client.get('/api/images/nope').status_code, 404)

    def test_list_ordered(self):
        self.create(url='/uploads/square.png', order=3)
        self.create(url='/uploads/landscape.png', order=1)
        self.create(url='/uploads/portrait.png', order=2)
        urls = [img['url'] for img in self.client.get('/api/images').json()]
        self.assertEqual(urls, ['/uploads/landscape.png', '/uploads/portrait.png',
                                '/uploads/square.png'])

    def test_list_filters(self):
        self.create(url='/a.png', category='travel', featured=True)
        self.create(url='/b.png', category='portrait')
        self.assertEqual(len(self.client.get('/api/images?category=travel').json()), 1)
        featured = self.client.get('/api/images?featured=true').json()
        self.assertEqual([img['url'] for img in featured], ['/a.png'])

    def test_list_filters_by_section(self):
        self.create(url='/a.png', section_id='home')
        self.create(url='/b.png', sectionId='about')
        self.create(url='/c.png')
        by_snake = self.client.get('/api/images?section_id=home').json()
        by_camel = self.client.get('/api/images?sectionId=about').json()
        self.assertEqual([img['url'] for img in by_snake], ['/a.png'])
        self.assertEqual([img['url'] for img in by_camel], ['/b.png'])
        self.assertEqual(len(self.client.get('/api/images').json()), 3)

    def test_tags(self):
        image = self.create(url='/a.png', tags=['desert', 'dunes'])
        self.assertEqual(image['tags'], ['desert', 'dunes'])
        self.assertEqual(self.create(url='/b.png')['tags'], [])

        response = self.client.put(f"/api/images/{image['id']}", json={'tags': ['sand']})
        self.assertEqual(response.json()['tags'], ['sand'])
        stored = self.client.get(f"/api/images/{image['id']}").json()
        self.assertEqual(stored['tags'], ['sand'])

    def test_update(self):
        image = self.create(url='/uploads/landscape.png', alt='old')
        response = self.client.put(f"/api/images/{image['id']}", json={'alt': 'new', 'order': 7})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['alt'], 'new')
        self.assertEqual(response.json()['order'], 7)
        self.assertEqual(response.json()['url'], '/uploads/landscape.png')

    def test_update_unknown(self):
        response = self.client.put('/api/images/nope', json={'alt': 'x'})
        self.assertEqual(response.status_code, 404)

    def test_update_empty_url(self):
        image = self.create(url='/uploads/landscape.png')
        response = self.client.put(f"/api/images/{image['id']}", json={'url': ''})
        self.assertEqual(response.status_code, 400)

    def test_delete(self):
        image = self.create(url='/uploads/landscape.png')
        response = self.client.delete(f"/api/images/{image['id']}")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'message': 'Image deleted successfully'})
        self.assertEqual(self.client.delete(f"/api/images/{image['id']}").status_code, 404)

    def test_reorder(self):
        a = self.create(url='/a.png', order=0)
        b = self.create(url='/b.png', order=1)
        response = self.client.put('/api/images/reorder', json={'ids': [b['id'], a['id'], 'gone']})
        self.assertEqual(response.json(), {'success': True, 'updated': 2})
        urls = [img['url'] for img in self.client.get('/api/images').json()]
        self.assertEqual(urls, ['/b.png', '/a.png'])

    def test_conflicting_row_type_rejected(self):
        self.create(url='/a.png', mobile_row_type='1:1-9:16', mobile_row_order=1)
        response = self.client.post('/api/images', json={
            'url': '/b.png', 'mobile_row_type': '9:16-9:16', 'mobile_row_order': 1,
        })
        self.assertEqual(response.status_code, 422)
        # Same type in the same row, or another row, is fine
        self.create(url='/c.png', mobile_row_type='1:1-9:16', mobile_row_order=1)
        self.create(url='/d.png', mobile_row_type='9:16-9:16', mobile_row_order=2)

    def test_conflicting_row_type_on_update(self):
        self.create(url='/a.png', mobile_row_type='1:1-1:1', mobile_row_order=1)
        other = self.create(url='/b.png', mobile_row_type='9:16-9:16', mobile_row_order=2)
        response = self.client.put(f"/api/images/{other['id']}", json={'mobile_row_order': 1})
        self.assertEqual(response.status_code, 422)


# ============================================
# TIER 2: Auth
# ============================================

class TestAuthWithPassword(ApiTestCase):

    password = 'hunter2'

    def test_writes_need_token(self):
        response = self.client.post('/api/images', json={'url': '/a.png'})
        self.assertEqual(response.status_code, 401)

    def test_reads_are_public(self):
        self.assertEqual(self.client.get('/api/images').status_code, 200)
        self.assertEqual(self.client.get('/api/layout?width=1000').status_code, 200)

    def test_wrong_password(self):
        response = self.client.post('/api/auth/login', json={'password': 'nope'})
        self.assertEqual(response.status_code, 401)

    def test_login_then_write(self):
        response = self.client.post('/api/auth/login', json={'password': 'hunter2'})
        self.assertEqual(response.status_code, 200)
        token = response.json()['access_token']
        headers = {'Authorization': f'Bearer {token}'}

        status = self.client.get('/api/auth/status', headers=headers).json()
        self.assertEqual(status, {'authenticated': True, 'password_required': True})

        response = self.client.post('/api/images', json={'url': '/a.png'}, headers=headers)
        self.assertEqual(response.status_code, 201)

    def test_bad_token(self):
        headers = {'Authorization': 'Bearer not-a-token'}
        response = self.client.post('/api/images', json={'url': '/a.png'}, headers=headers)
        self.assertEqual(response.status_code, 401)


class TestAuthWithoutPassword(ApiTestCase):

    def test_status(self):
        status = self.client.get('/api/auth/status').json()
        self.assertEqual(status, {'authenticated': True, 'password_required': False})

    def test_login_returns_token(self):
        response = self.client.post('/api/auth/login', json={'password': ''})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['token_type'], 'bearer')


# ============================================
# TIER 3: Layout and reveal
# ============================================

class TestLayout(ApiTestCase):

    def setUp(self):
        super().setUp()
        self.landscape = self.create(url='/uploads/landscape.png', order=1, aspect_ratio='16:9',
                                     mobile_row_type='1:1-9:16', mobile_row_order=1,
                                     mobile_position=2)
        self.portrait = self.create(url='/uploads/portrait.png', order=2, aspect_ratio='9:16',
                                    mobile_row_type='1:1-9:16', mobile_row_order=1,
                                    mobile_position=3)
        self.square = self.create(url='/uploads/square.png', order=3, aspect_ratio='1:1',
                                  mobile_row_type='1:1-9:16', mobile_row_order=1,
                                  mobile_position=1)

    def test_desktop_rows_fill_width(self):
        plan = self.client.get('/api/layout?width=1000&mode=desktop').json()
        self.assertEqual(plan['mode'], 'desktop')
        self.assertEqual(plan['row_count'], len(plan['rows']))
        ids = [item['image_id'] for row in plan['rows'] for item in row['items']]
        self.assertEqual(ids, [self.landscape['id'], self.portrait['id'], self.square['id']])
        for row in plan['rows']:
            self.assertAlmostEqual(sum(item['width'] for item in row['items']), 1000, places=6)
            for item in row['items']:
                self.assertAlmostEqual(item['height'], row['height'], places=6)

    def test_desktop_uses_natural_aspect_ratios(self):
        plan = self.client.get('/api/layout?width=1000&mode=desktop').json()
        items = {item['image_id']: item for row in plan['rows'] for item in row['items']}
        self.assertAlmostEqual(items[self.landscape['id']]['aspect_ratio'], 1.5)
        self.assertAlmostEqual(items[self.portrait['id']]['aspect_ratio'], 2 / 3)

    def test_malformed_url_uses_fallback_ratio(self):
        self.create(url='http://[::1', order=4)
        with self.assertLogs(level='WARNING'):
            response = self.client.get('/api/layout?width=1000&mode=desktop')
        self.assertEqual(response.status_code, 200)
        items = [item for row in response.json()['rows'] for item in row['items']]
        self.assertEqual(len(items), 4)
        self.assertAlmostEqual(items[-1]['aspect_ratio'], 16 / 9)

    def test_missing_file_uses_fallback_ratio(self):
        self.create(url='/uploads/missing.png', order=4)
        with self.assertLogs(level='WARNING'):
            plan = self.client.get('/api/layout?width=1000&mode=desktop').json()
        items = [item for row in plan['rows'] for item in row['items']]
        self.assertEqual(len(items), 4)
        self.assertAlmostEqual(items[-1]['aspect_ratio'], 16 / 9)

    def test_mobile_rows_use_declared_tags(self):
        plan = self.client.get('/api/layout?width=375&mode=mobile').json()
        self.assertEqual(plan['row_count'], 1)
        items = plan['rows'][0]['items']
        # Sorted by mobile position within the row
        self.assertEqual([item['image_id'] for item in items],
                         [self.square['id'], self.landscape['id'], self.portrait['id']])
        self.assertAlmostEqual(sum(item['width_percent'] for item in items), 100.0)
        self.assertAlmostEqual(items[0]['width_percent'] / items[2]['width_percent'], 1 / (9 / 16))

    def test_mode_from_viewport(self):
        plan = self.client.get('/api/layout?width=375&viewport=375').json()
        self.assertEqual(plan['mode'], 'mobile')
        plan = self.client.get('/api/layout?width=1200&viewport=1280').json()
        self.assertEqual(plan['mode'], 'desktop')

    def test_zero_width_has_no_rows(self):
        for mode in ('desktop', 'mobile'):
            plan = self.client.get(f'/api/layout?width=0&mode={mode}').json()
            self.assertEqual(plan['rows'], [])

    def test_invalid_mode(self):
        response = self.client.get('/api/layout?width=1000&mode=tablet')
        self.assertEqual(response.status_code, 400)

    def test_reveal_delay_follows_source_order(self):
        plan = self.client.get('/api/layout?width=375&mode=mobile').json()
        delays = {item['image_id']: item['reveal_delay_ms'] for item in plan['rows'][0]['items']}
        self.assertEqual(delays[self.landscape['id']], 0)
        self.assertEqual(delays[self.portrait['id']], 50)
        self.assertEqual(delays[self.square['id']], 100)

    def test_reveal_session_is_monotonic(self):
        session = 'visitor-1'
        response = self.client.post('/api/layout/reveal',
                                    json={'session': session, 'image_id': self.portrait['id']})
        self.assertEqual(response.json()['revealed'], [self.portrait['id']])
        self.client.post('/api/layout/reveal',
                         json={'session': session, 'image_id': self.portrait['id']})
        self.client.post('/api/layout/reveal',
                         json={'session': session, 'image_id': self.square['id']})

        state = self.client.get(f'/api/layout/reveal?session={session}').json()
        self.assertEqual(sorted(state['revealed']), sorted([self.portrait['id'], self.square['id']]))

        plan = self.client.get(f'/api/layout?width=1000&mode=desktop&session={session}').json()
        revealed = {item['image_id']: item['revealed'] for row in plan['rows'] for item in row['items']}
        self.assertEqual(revealed, {
            self.landscape['id']: False, self.portrait['id']: True, self.square['id']: True,
        })

    def test_sessions_are_independent(self):
        self.client.post('/api/layout/reveal', json={'session': 'a', 'image_id': self.square['id']})
        state = self.client.get('/api/layout/reveal?session=b').json()
        self.assertEqual(state['revealed'], [])


if __name__ == '__main__':
    unittest.main()
