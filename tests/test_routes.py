import threading
import time
import unittest
from datetime import datetime, timezone
from unittest.mock import patch

from flask import session

from autoservice.navigation_guard import PromptChoice
from flask_app import create_app
from flask_app.services.guard_service import SESSION_KEY, NavigationGuardService


def _frozen(*args):
    return patch('autoservice.timezone_utils.utc_now',
                 return_value=datetime(*args, tzinfo=timezone.utc))


class ClockRoutesTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = create_app('testing')

    def setUp(self):
        NavigationGuardService.reset()
        self.client = self.app.test_client()

    def test_clock_reports_civil_values(self):
        with _frozen(2024, 3, 11, 2, 0, 0):
            response = self.client.get('/api/clock')

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['date'], '2024-03-10')
        self.assertEqual(data['time'], '23:00:00')
        self.assertEqual(data['week_start'], '2024-03-04')
        self.assertEqual(data['day_of_week'], 0)
        self.assertEqual(data['timezone'], 'America/Sao_Paulo')

    def test_parse_returns_utc_instant(self):
        response = self.client.post('/api/clock/parse', json={'date': '2024-03-10', 'time': '14:30:00'})

        self.assertEqual(response.status_code, 200)
        data = response.get_json()
        self.assertEqual(data['instant_utc'], '2024-03-10T17:30:00Z')
        self.assertEqual(data['instant'], '2024-03-10T14:30:00-03:00')
        self.assertEqual(data['date'], '2024-03-10')
        self.assertEqual(data['time'], '14:30:00')

    def test_parse_accepts_form_data(self):
        response = self.client.post('/api/clock/parse', data={'date': '2024-03-10', 'time': '22:00'})
        self.assertEqual(response.get_json()['instant_utc'], '2024-03-11T01:00:00Z')

    def test_parse_rejects_malformed_input(self):
        for payload in ({'date': '10/03/2024', 'time': '14:30:00'},
                        {'date': '2024-03-10', 'time': '25:00:00'},
                        {'date': '2024-03-10'}):
            response = self.client.post('/api/clock/parse', json=payload)
            self.assertEqual(response.status_code, 400)
            self.assertIn('error', response.get_json())

    def test_parse_rejects_non_object_body(self):
        response = self.client.post('/api/clock/parse', json=['2024-03-10', '14:30:00'])
        self.assertEqual(response.status_code, 400)
        self.assertIn('error', response.get_json())

    def test_parse_rejects_non_string_values(self):
        for payload in ({'date': 20240310, 'time': '14:30:00'},
                        {'date': '2024-03-10', 'time': ['14:30:00']}):
            response = self.client.post('/api/clock/parse', json=payload)
            self.assertEqual(response.status_code, 400)
            self.assertIn('error', response.get_json())

    def test_parse_rejects_out_of_range_instant(self):
        response = self.client.post('/api/clock/parse', json={'date': '0001-01-01', 'time': '00:00'})
        self.assertEqual(response.status_code, 400)
        self.assertIn('error', response.get_json())

    def test_parse_pads_early_years(self):
        response = self.client.post('/api/clock/parse', json={'date': '0999-06-15', 'time': '12:00:00'})
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.get_json()['instant_utc'], '0999-06-15T15:00:00Z')
        self.assertEqual(response.get_json()['date'], '0999-06-15')

    def test_week_start_for_date(self):
        response = self.client.get('/api/week-start?date=2024-03-10')
        self.assertEqual(response.get_json()['week_start'], '2024-03-04')

        response = self.client.get('/api/week-start?date=03/10/2024')
        self.assertEqual(response.status_code, 400)

    def test_week_start_defaults_to_current_week(self):
        with _frozen(2024, 3, 13, 12, 0, 0):
            response = self.client.get('/api/week-start')
        self.assertEqual(response.get_json(), {'week_start': '2024-03-11'})

    def test_date_offset(self):
        response = self.client.get('/api/date-offset?days=-30&start=2024-03-10')
        self.assertEqual(response.get_json(), {'days': -30, 'date': '2024-02-09'})

        response = self.client.get('/api/date-offset?days=abc')
        self.assertEqual(response.status_code, 400)

    def test_date_offset_out_of_range(self):
        response = self.client.get('/api/date-offset?days=1&start=9999-12-31')
        self.assertEqual(response.status_code, 400)
        self.assertIn('error', response.get_json())

    def test_civil_time_filter(self):
        with self.app.app_context():
            civil_time = self.app.jinja_env.filters['civil_time']
            self.assertEqual(civil_time(0), '21:00:00')
            self.assertEqual(civil_time(None), 'Unknown')
            self.assertEqual(civil_time('later'), 'Unknown')

    def test_dashboard_renders_civil_week(self):
        with _frozen(2024, 3, 10, 15, 0, 0):
            response = self.client.get('/dashboard')

        self.assertEqual(response.status_code, 200)
        html = response.get_data(as_text=True)
        self.assertIn('2024-03-10', html)
        self.assertIn('<span id="week-start">2024-03-04</span>', html)
        self.assertIn('<span id="week-end">2024-03-10</span>', html)

    def test_civil_date_filter(self):
        with self.app.app_context():
            civil_date = self.app.jinja_env.filters['civil_date']
            self.assertEqual(civil_date(0), '1969-12-31')
            self.assertEqual(civil_date(None), 'Never')
            self.assertEqual(civil_date('not-a-timestamp'), 'Unknown')
            self.assertEqual(civil_date(datetime(2024, 3, 11, 2, 0, tzinfo=timezone.utc)), '2024-03-10')


class GuardRoutesTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = create_app('testing')

    def setUp(self):
        NavigationGuardService.reset()
        self.client = self.app.test_client()

    def _request(self, target, dirty=True, client=None):
        client = client or self.client
        return client.post('/guard/request', data={
            'next': target,
            'has_unsaved_changes': '1' if dirty else '0',
        })

    def _state(self, client=None):
        return (client or self.client).get('/guard/state').get_json()

    def test_clean_screen_navigates_immediately(self):
        response = self._request('/services', dirty=False)

        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.headers['Location'].endswith('/services'))
        self.assertFalse(self._state()['prompt_visible'])

    def test_dirty_screen_shows_dialog(self):
        response = self._request('/services')

        self.assertEqual(response.status_code, 200)
        html = response.get_data(as_text=True)
        self.assertIn('Alterações não salvas', html)
        self.assertIn('Sair sem salvar', html)
        self.assertIn('Cancelar', html)

        state = self._state()
        self.assertEqual(state['state'], 'awaiting_confirmation')
        self.assertTrue(state['prompt_visible'])

    def test_confirm_redirects_once(self):
        self._request('/services')

        response = self.client.post('/guard/confirm')
        self.assertEqual(response.status_code, 302)
        self.assertTrue(response.headers['Location'].endswith('/services'))
        self.assertEqual(self._state()['state'], 'idle')

        response = self.client.post('/guard/confirm')
        self.assertTrue(response.headers['Location'].endswith('/dashboard'))

    def test_cancel_drops_pending_navigation(self):
        self._request('/services')

        self.client.post('/guard/cancel')
        self.assertEqual(self._state()['state'], 'idle')

        response = self.client.post('/guard/confirm')
        self.assertTrue(response.headers['Location'].endswith('/dashboard'))

    def test_dismiss_drops_pending_navigation(self):
        self._request('/services')

        response = self.client.post('/guard/dismiss', headers={'Referer': '/services/new'})
        self.assertTrue(response.headers['Location'].endswith('/services/new'))
        self.assertFalse(self._state()['prompt_visible'])

    def test_last_request_wins(self):
        self._request('/customers')
        self._request('/vehicles')

        response = self.client.post('/guard/confirm')
        self.assertTrue(response.headers['Location'].endswith('/vehicles'))

    def test_rejects_off_site_target(self):
        response = self._request('https://example.com/phish')

        self.assertEqual(response.status_code, 302)
        self.assertFalse(self._state()['prompt_visible'])

    def test_sessions_do_not_share_guards(self):
        other = self.app.test_client()
        self._request('/services')

        self.assertTrue(self._state()['prompt_visible'])
        self.assertFalse(self._state(other)['prompt_visible'])

    def test_dialog_hidden_when_idle(self):
        response = self.client.get('/guard/dialog')

        self.assertEqual(response.status_code, 200)
        self.assertNotIn('unsaved-changes-dialog', response.get_data(as_text=True))

    def test_prompt_copy_comes_from_config(self):
        app = create_app('testing')
        app.config['UNSAVED_CHANGES_CONFIRM_LABEL'] = 'Descartar'
        client = app.test_client()

        response = self._request('/services', client=client)
        self.assertIn('Descartar', response.get_data(as_text=True))

    def test_read_only_requests_keep_no_guards(self):
        for _ in range(50):
            self.app.test_client().get('/dashboard')
            self.app.test_client().get('/guard/state')
            self.app.test_client().get('/guard/dialog')

        self.assertEqual(NavigationGuardService.active_count(), 0)

    def test_guard_dropped_once_idle(self):
        self._request('/services', dirty=False)
        self.assertEqual(NavigationGuardService.active_count(), 0)

        self._request('/services')
        self.assertEqual(NavigationGuardService.active_count(), 1)
        self.client.post('/guard/confirm')
        self.assertEqual(NavigationGuardService.active_count(), 0)

        self._request('/services')
        self.client.post('/guard/cancel')
        self.assertEqual(NavigationGuardService.active_count(), 0)

        # A new request after the guard was dropped still prompts.
        response = self._request('/vehicles')
        self.assertEqual(response.status_code, 200)
        self.assertTrue(self._state()['prompt_visible'])


class GuardServiceConcurrencyTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.app = create_app('testing')

    def setUp(self):
        NavigationGuardService.reset()

    def _in_session(self, session_id, func):
        with self.app.test_request_context('/guard/confirm', method='POST'):
            session[SESSION_KEY] = session_id
            return func(NavigationGuardService())

    def test_concurrent_confirms_run_action_once(self):
        calls = []
        calls_lock = threading.Lock()

        def slow_action():
            with calls_lock:
                calls.append(threading.current_thread().name)
            time.sleep(0.05)
            return 'redirected'

        results = []
        errors = []

        def confirm():
            try:
                results.append(self._in_session('shared', lambda s: s.resolve(PromptChoice.CONFIRM)))
            except Exception as e:
                errors.append(e)

        with patch.object(NavigationGuardService, '_redirect_action', return_value=slow_action):
            self._in_session('shared', lambda s: s.request_redirect('/services', True))
            threads = [threading.Thread(target=confirm) for _ in range(8)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(len(calls), 1)
        self.assertEqual(results.count('redirected'), 1)
        self.assertEqual(results.count(None), 7)
        self.assertEqual(NavigationGuardService.active_count(), 0)


if __name__ == '__main__':
    unittest.main()
