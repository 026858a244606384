"""
Tests for the web server routes and Socket.IO events.

The server thread is never started; the Flask and Socket.IO test clients
talk to the app directly.
"""

import unittest
import logging

from memory_match.best_scores import BestScoreStore
from memory_match.frontend.web_frontend import WebFrontEnd
from memory_match.scheduler import ManualScheduler
from memory_match.session import GameSession
from memory_match.web import server


class EmptyStore(BestScoreStore):
    def load(self):
        return {}

    def save(self, records):
        return True


class TestWebServer(unittest.TestCase):
    """Test cases for the Flask + Socket.IO server."""

    def setUp(self):
        """Attach a web front end that records posted actions."""
        logging.basicConfig(level=logging.CRITICAL)

        self.posted = []
        self.accept = True

        def callback(action, value=None, source=None):
            self.posted.append((action, value, source))
            return self.accept

        self.frontend = WebFrontEnd()
        self.frontend.register_input_callback(callback)
        self.session = GameSession(EmptyStore(), ManualScheduler())
        self.frontend.last_state = self.session.snapshot()
        server.set_web_frontend(self.frontend)

        self.client = server.app.test_client()

    def tearDown(self):
        server.set_web_frontend(None)

    def test_index_lists_actions(self):
        """Test the root lists client actions without the timer tick."""
        response = self.client.get('/')
        data = response.get_json()

        self.assertEqual(response.status_code, 200)
        self.assertIn('click_card', data['actions'])
        self.assertNotIn('tick', data['actions'])

    def test_health(self):
        """Test the health endpoint reports the attached front end."""
        data = self.client.get('/api/health').get_json()
        self.assertEqual(data, {'status': 'ok', 'frontend': True})

    def test_state(self):
        """Test the state endpoint returns the latest snapshot."""
        response = self.client.get('/api/state')
        data = response.get_json()

        self.assertEqual(response.status_code, 200)
        self.assertEqual(data['state'], 'start')
        self.assertEqual(data['difficulty'], 'medium')

    def test_state_without_game(self):
        """Test the state endpoint reports when nothing is running."""
        server.set_web_frontend(None)

        response = self.client.get('/api/state')
        self.assertEqual(response.status_code, 503)

    def test_best_scores(self):
        """Test the best scores endpoint lists every difficulty."""
        data = self.client.get('/api/best-scores').get_json()

        self.assertEqual(set(data), {'easy', 'medium', 'hard'})
        self.assertEqual(data['easy'], {'moves': None, 'time': None})

    def test_post_event(self):
        """Test posting an action queues it through the front end."""
        response = self.client.post('/api/events/click_card', json={'value': 5})

        self.assertEqual(response.status_code, 202)
        self.assertEqual(response.get_json(), {'queued': 'click_card'})
        self.assertEqual(self.posted, [('click_card', 5, 'web')])

    def test_post_event_without_body(self):
        """Test actions without arguments need no body."""
        response = self.client.post('/api/events/start_game')

        self.assertEqual(response.status_code, 202)
        self.assertEqual(self.posted, [('start_game', None, 'web')])

    def test_post_unknown_event(self):
        """Test unknown actions and the server-side tick are refused."""
        self.assertEqual(self.client.post('/api/events/warp').status_code, 404)
        self.assertEqual(self.client.post('/api/events/tick').status_code, 404)
        self.assertEqual(self.posted, [])

    def test_post_event_rejected(self):
        """Test a full input queue is reported to the client."""
        self.accept = False

        response = self.client.post('/api/events/reset_game')
        self.assertEqual(response.status_code, 503)

    def test_post_event_without_game(self):
        """Test posting with no front end attached."""
        server.set_web_frontend(None)

        response = self.client.post('/api/events/start_game')
        self.assertEqual(response.status_code, 503)


class TestSocketEvents(unittest.TestCase):
    """Test cases for Socket.IO event handling."""

    def setUp(self):
        logging.basicConfig(level=logging.CRITICAL)

        self.posted = []
        self.frontend = WebFrontEnd()
        self.frontend.register_input_callback(
            lambda action, value=None, source=None: self.posted.append((action, value)) or True
        )
        self.frontend.last_state = GameSession(EmptyStore(), ManualScheduler()).snapshot()
        server.set_web_frontend(self.frontend)

        self.client = server.socketio.test_client(server.app)

    def tearDown(self):
        if self.client.is_connected():
            self.client.disconnect()
        server.set_web_frontend(None)

    def test_connect_sends_state(self):
        """Test a new client receives the current state."""
        received = self.client.get_received()
        updates = [r for r in received if r['name'] == 'state_update']

        self.assertEqual(len(updates), 1)
        self.assertEqual(updates[0]['args'][0]['state'], 'start')

    def test_click_card(self):
        """Test card clicks are forwarded with their index."""
        self.client.emit('click_card', {'index': 3})
        self.client.emit('click_card', {'position': 3})

        self.assertEqual(self.posted, [('click_card', 3)])

    def test_select_difficulty(self):
        """Test difficulty changes are forwarded."""
        self.client.emit('select_difficulty', {'difficulty': 'hard'})
        self.client.emit('select_difficulty', 'hard')

        self.assertEqual(self.posted, [('select_difficulty', 'hard')])

    def test_simple_actions(self):
        """Test actions without arguments are forwarded."""
        for action in ('start_game', 'play_again', 'reset_game', 'return_to_menu'):
            self.client.emit(action)

        self.assertEqual(
            [p[0] for p in self.posted],
            ['start_game', 'play_again', 'reset_game', 'return_to_menu']
        )

    def test_state_update_broadcast(self):
        """Test front end snapshots reach connected clients."""
        self.client.get_received()
        session = GameSession(EmptyStore(), ManualScheduler())
        session.start_game()

        self.frontend.show_state(session.snapshot())

        received = self.client.get_received()
        self.assertEqual(received[-1]['name'], 'state_update')
        self.assertEqual(received[-1]['args'][0]['state'], 'playing')


if __name__ == '__main__':
    unittest.main()
