"""
Tests for notification channels and the access token lifecycle.
"""

import pytest
import json
from unittest.mock import Mock

from channels.token_manager import AccessTokenManager, TokenState
from channels.webhook_channel import WebhookChannel
from channels.wecom_channel import (
    GET_TOKEN_URL,
    SEND_MESSAGE_URL,
    WeComChannel,
    join_targets,
)
from models.fetch_result import FetchResult
from models.notification import Notification
from utils.exceptions import TokenRefreshError, TransportError


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def ok(body):
    return FetchResult(url='u', body=json.dumps(body) if not isinstance(body, str) else body)


def failed(message='connection refused'):
    return FetchResult(url='u', error=TransportError(message))


class TestAccessTokenManager:
    """Tests for AccessTokenManager."""

    def test_starts_unset_and_refreshes(self):
        refresh = Mock(return_value=('tok-1', 7200))
        manager = AccessTokenManager(refresh, clock=FakeClock())

        assert manager.state is TokenState.UNSET
        assert manager.get_token() == 'tok-1'
        assert manager.state is TokenState.VALID
        refresh.assert_called_once()

    def test_token_expires_before_nominal_lifetime(self):
        clock = FakeClock(0.0)
        refresh = Mock(side_effect=[('tok-1', 3600), ('tok-2', 3600)])
        manager = AccessTokenManager(refresh, expiry_margin=60, clock=clock)
        manager.get_token()

        clock.now = 3539.0
        assert manager.state is TokenState.VALID
        assert manager.get_token() == 'tok-1'

        clock.now = 3540.0
        assert manager.state is TokenState.EXPIRED
        assert manager.get_token() == 'tok-2'
        assert refresh.call_count == 2

    def test_invalidate_forces_refresh(self):
        refresh = Mock(side_effect=[('tok-1', 7200), ('tok-2', 7200)])
        manager = AccessTokenManager(refresh, clock=FakeClock())
        manager.get_token()

        manager.invalidate()

        assert manager.state is TokenState.EXPIRED
        assert manager.get_token() == 'tok-2'

    def test_refresh_failure_raises_token_error(self):
        manager = AccessTokenManager(Mock(side_effect=ValueError('boom')), clock=FakeClock())

        with pytest.raises(TokenRefreshError):
            manager.get_token()
        assert manager.state is TokenState.UNSET

    def test_failed_refresh_after_valid_leaves_expired(self):
        clock = FakeClock(0.0)
        refresh = Mock(side_effect=[('tok-1', 100), TokenRefreshError('down')])
        manager = AccessTokenManager(refresh, expiry_margin=10, clock=clock)
        manager.get_token()

        clock.now = 200.0
        with pytest.raises(TokenRefreshError):
            manager.get_token()
        assert manager.state is TokenState.EXPIRED


class TestWebhookChannel:
    """Tests for WebhookChannel."""

    def test_get_channel_name(self):
        channel = WebhookChannel({'url': 'https://hooks.example.com'}, client=Mock())
        assert channel.get_channel_name() == 'webhook'

    def test_send_text_as_query_parameter(self):
        client = Mock()
        client.request.return_value = ok({'ok': True, 'result': {'message_id': 42}})
        channel = WebhookChannel(
            {'url': 'https://api.telegram.org/botX/sendMessage?chat_id=1'}, client=client
        )

        result = channel.send(Notification(text='[2025-01-15 10:30:00]\n90\tCalculus[3]'))

        assert result.success
        assert result.message_id == '42'
        method, url = client.request.call_args.args
        assert method == 'POST'
        assert url == 'https://api.telegram.org/botX/sendMessage?chat_id=1'
        assert client.request.call_args.kwargs['params'] == {
            'text': '[2025-01-15 10:30:00]\n90\tCalculus[3]'
        }

    def test_rejected_message(self):
        client = Mock()
        client.request.return_value = ok({'ok': False, 'description': 'chat not found'})
        channel = WebhookChannel({'url': 'https://hooks.example.com'}, client=client)

        result = channel.send(Notification(text='hi'))

        assert not result.success
        assert result.error == 'chat not found'

    def test_transport_failure(self):
        client = Mock()
        client.request.return_value = failed()
        channel = WebhookChannel({'url': 'https://hooks.example.com'}, client=client)

        result = channel.send(Notification(text='hi'))

        assert not result.success
        assert 'connection refused' in result.error

    def test_plain_text_response_counts_as_delivered(self):
        client = Mock()
        client.request.return_value = ok('OK')
        channel = WebhookChannel({'url': 'https://hooks.example.com', 'method': 'get'}, client=client)

        assert channel.send(Notification(text='hi')).success
        assert client.request.call_args.args[0] == 'GET'


class TestWeComChannel:
    """Tests for WeComChannel."""

    def setup_method(self):
        self.config = {'corp_id': 'corp', 'corp_secret': 'secret', 'agent_id': 1000002}
        self.clock = FakeClock(0.0)
        self.client = Mock()

    def make_channel(self, **overrides):
        channel = WeComChannel({**self.config, **overrides}, client=self.client)
        channel.tokens = AccessTokenManager(channel._request_token, clock=self.clock)
        return channel

    def test_join_targets(self):
        assert join_targets(['a', 'b']) == 'a|b'
        assert join_targets('@all') == '@all'
        assert join_targets(None) == ''

    def test_send_text_message(self):
        self.client.get.return_value = ok(
            {'errcode': 0, 'errmsg': 'ok', 'access_token': 'tok-1', 'expires_in': 7200}
        )
        self.client.post.return_value = ok({'errcode': 0, 'errmsg': 'ok', 'msgid': 'm-1'})
        channel = self.make_channel()

        result = channel.send(Notification(text='grades', recipient='zhangsan'))

        assert result.success
        assert result.message_id == 'm-1'
        assert self.client.get.call_args.args[0] == GET_TOKEN_URL
        assert self.client.get.call_args.kwargs['params'] == {
            'corpid': 'corp', 'corpsecret': 'secret'
        }
        assert self.client.post.call_args.args[0] == SEND_MESSAGE_URL
        assert self.client.post.call_args.kwargs['params'] == {'access_token': 'tok-1'}
        assert self.client.post.call_args.kwargs['json_body'] == {
            'touser': 'zhangsan',
            'msgtype': 'text',
            'agentid': 1000002,
            'text': {'content': 'grades'},
        }

    def test_token_reused_until_expiry(self):
        self.client.get.side_effect = [
            ok({'errcode': 0, 'access_token': 'tok-1', 'expires_in': 3600}),
            ok({'errcode': 0, 'access_token': 'tok-2', 'expires_in': 3600}),
        ]
        self.client.post.return_value = ok({'errcode': 0, 'msgid': 'm'})
        channel = self.make_channel(default_target='@all')

        channel.send(Notification(text='one'))
        self.clock.now = 1800.0
        channel.send(Notification(text='two'))
        assert self.client.get.call_count == 1

        self.clock.now = 3600.0
        channel.send(Notification(text='three'))
        assert self.client.get.call_count == 2
        assert self.client.post.call_args.kwargs['params'] == {'access_token': 'tok-2'}

    def test_invalid_token_refreshes_and_resends(self):
        self.client.get.side_effect = [
            ok({'errcode': 0, 'access_token': 'stale', 'expires_in': 7200}),
            ok({'errcode': 0, 'access_token': 'fresh', 'expires_in': 7200}),
        ]
        self.client.post.side_effect = [
            ok({'errcode': 42001, 'errmsg': 'access_token expired'}),
            ok({'errcode': 0, 'errmsg': 'ok', 'msgid': 'm-2'}),
        ]
        channel = self.make_channel(default_target='@all')

        result = channel.send(Notification(text='grades'))

        assert result.success
        assert self.client.get.call_count == 2
        assert self.client.post.call_args.kwargs['params'] == {'access_token': 'fresh'}

    def test_token_rejected_twice_gives_up(self):
        self.client.get.side_effect = [
            ok({'errcode': 0, 'access_token': 'stale', 'expires_in': 7200}),
            ok({'errcode': 0, 'access_token': 'also-stale', 'expires_in': 7200}),
        ]
        self.client.post.return_value = ok({'errcode': 40014, 'errmsg': 'invalid access_token'})
        channel = self.make_channel(default_target='@all')

        result = channel.send(Notification(text='grades'))

        assert not result.success
        assert result.error == 'Access token rejected after refresh'
        assert self.client.post.call_count == 2
        assert self.client.get.call_count == 2

    def test_refresh_failure_is_delivery_failure(self):
        self.client.get.return_value = ok({'errcode': 40013, 'errmsg': 'invalid corpid'})
        channel = self.make_channel(default_target='@all')

        result = channel.send(Notification(text='grades'))

        assert not result.success
        assert 'temporarily unavailable' in result.error
        self.client.post.assert_not_called()

    def test_api_error_code(self):
        self.client.get.return_value = ok({'errcode': 0, 'access_token': 't', 'expires_in': 7200})
        self.client.post.return_value = ok({'errcode': 81013, 'errmsg': 'user invalid'})
        channel = self.make_channel(default_target='nobody')

        result = channel.send(Notification(text='grades'))

        assert not result.success
        assert '81013' in result.error

    def test_missing_target(self):
        result = self.make_channel().send(Notification(text='grades'))

        assert not result.success
        self.client.get.assert_not_called()

    def test_textcard_payload(self):
        channel = self.make_channel(msgtype='textcard', card_url='https://jw.example.edu.cn',
                                    target_type='tag', safe=1)
        payload = channel.build_payload(Notification(text='a\nb', title='Grade update'), '3')

        assert payload['totag'] == '3'
        assert payload['safe'] == 1
        assert payload['textcard'] == {
            'title': 'Grade update',
            'description': 'a<br>b',
            'url': 'https://jw.example.edu.cn',
        }


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
