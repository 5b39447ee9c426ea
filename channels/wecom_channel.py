"""
WeCom (WeChat Work) application message channel.

Rate limits imposed by the platform:
    - each application may message at most (account limit * 200) person-times per day
    - each application may message the same member at most 30 times per minute;
      anything above that is silently dropped
"""

import json
from typing import Dict, Any, List, Optional, Tuple, Union

from channels.base_channel import BaseChannel
from channels.token_manager import AccessTokenManager, DEFAULT_EXPIRY_MARGIN
from fetchers.http_client import HTTPClient
from models.delivery_result import DeliveryResult
from models.notification import Notification
from utils.exceptions import TokenRefreshError

GET_TOKEN_URL = 'https://qyapi.weixin.qq.com/cgi-bin/gettoken'
SEND_MESSAGE_URL = 'https://qyapi.weixin.qq.com/cgi-bin/message/send'

# errcodes meaning the access token is invalid or has expired
INVALID_TOKEN_CODES = {40001, 40014, 42001}

TARGET_FIELDS = {
    'user': 'touser',
    'party': 'toparty',
    'tag': 'totag',
}


def join_targets(targets: Union[str, List[str], None]) -> str:
    """WeCom expects multiple recipients joined with '|'."""
    if not targets:
        return ''
    if isinstance(targets, str):
        return targets
    return '|'.join(str(target) for target in targets if target)


class WeComChannel(BaseChannel):
    """Sends text or text-card messages through a WeCom application."""

    def __init__(
        self,
        config: Dict[str, Any],
        settings: Dict[str, Any] = None,
        client: HTTPClient = None,
        token_manager: AccessTokenManager = None
    ):
        super().__init__(config, settings, client)
        self.corp_id = config.get('corp_id', '')
        self.corp_secret = config.get('corp_secret', '')
        self.agent_id = int(config.get('agent_id') or 0)
        self.target_type = config.get('target_type', 'user')
        self.default_target = join_targets(config.get('default_target'))
        self.msgtype = config.get('msgtype', 'text')
        self.card_url = config.get('card_url', '')
        self.safe = int(config.get('safe') or 0)
        self.tokens = token_manager or AccessTokenManager(
            self._request_token,
            expiry_margin=float(config.get('token_expiry_margin', DEFAULT_EXPIRY_MARGIN))
        )

    def get_channel_name(self) -> str:
        return "wecom"

    def _request_token(self) -> Tuple[str, float]:
        """Exchange corp id and secret for an access token."""
        result = self.client.get(
            GET_TOKEN_URL,
            params={'corpid': self.corp_id, 'corpsecret': self.corp_secret},
            max_retries=1
        )
        if not result.is_success:
            raise TokenRefreshError(f"Token request failed: {result.error_message}")

        payload = self._decode(result.body)
        if payload is None:
            raise TokenRefreshError("Token endpoint returned a non-JSON body")
        if payload.get('errcode', 0) != 0:
            raise TokenRefreshError(
                f"Token endpoint error {payload.get('errcode')}: {payload.get('errmsg')}"
            )
        return payload.get('access_token'), float(payload.get('expires_in', 0))

    @staticmethod
    def _decode(body: str) -> Optional[Dict[str, Any]]:
        try:
            payload = json.loads(body)
        except (TypeError, json.JSONDecodeError):
            return None
        return payload if isinstance(payload, dict) else None

    def build_payload(self, notification: Notification, target: str) -> Dict[str, Any]:
        target_field = TARGET_FIELDS.get(self.target_type, 'touser')
        payload = {
            target_field: target,
            'msgtype': self.msgtype,
            'agentid': self.agent_id,
        }
        if self.msgtype == 'textcard':
            card = {
                'title': notification.title,
                'description': notification.text.replace('\n', '<br>'),
                'url': self.card_url or 'https://work.weixin.qq.com',
            }
            if self.config.get('button_text'):
                card['btntxt'] = self.config['button_text']
            payload['textcard'] = card
        else:
            payload['text'] = {'content': notification.text}

        if self.safe:
            payload['safe'] = self.safe
        return payload

    def send(self, notification: Notification) -> DeliveryResult:
        target = join_targets(notification.recipient) or self.default_target
        if not target:
            return self.failed("No push target for this notification")

        payload = self.build_payload(notification, target)

        # One resend is allowed after the API reports the token as invalid.
        for attempt in range(2):
            try:
                token = self.tokens.get_token()
            except TokenRefreshError as e:
                return self.failed(f"Channel temporarily unavailable: {e}")

            result = self.client.post(
                SEND_MESSAGE_URL,
                params={'access_token': token},
                json_body=payload,
                max_retries=1
            )
            if not result.is_success:
                return self.failed(result.error_message)

            response = self._decode(result.body)
            if response is None:
                return self.failed("Send endpoint returned a non-JSON body")

            errcode = response.get('errcode', -1)
            if errcode == 0:
                return self.succeeded(response.get('msgid'))

            if errcode in INVALID_TOKEN_CODES:
                self.tokens.invalidate()
                if attempt == 0:
                    self.logger.info(f"Access token rejected ({errcode}), refreshing")
                    continue
                break

            return self.failed(f"errcode {errcode}: {response.get('errmsg')}")

        return self.failed("Access token rejected after refresh")
