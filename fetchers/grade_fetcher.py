"""
Grade query fetcher for the academic-affairs system.
Posts the per-student query with the student's session cookie.
"""

from typing import Dict, Any
from urllib.parse import quote, urlencode

from fetchers.base_fetcher import BaseFetcher
from fetchers.http_client import HTTPClient
from models.fetch_result import FetchResult
from models.subject import Subject

DEFAULT_PAGE_SIZE = 5000

DEFAULT_HEADERS = {
    'Accept': 'application/json, text/javascript, */*; q=0.01',
    'Accept-Language': 'zh-cn,zh;q=0.5',
    'Connection': 'keep-alive',
    'Content-Type': 'application/x-www-form-urlencoded;charset=UTF-8',
    'DNT': '1',
    'Sec-Fetch-Dest': 'empty',
    'Sec-Fetch-Mode': 'cors',
    'Sec-Fetch-Site': 'same-origin',
    'X-Requested-With': 'XMLHttpRequest',
}


class GradeFetcher(BaseFetcher):
    """Fetches the full grade list of one student."""

    def __init__(
        self,
        config: Dict[str, Any],
        settings: Dict[str, Any] = None,
        client: HTTPClient = None
    ):
        super().__init__(config, settings, client)
        self.request_url = config.get('request_url', '')
        self.page_size = int(config.get('page_size') or DEFAULT_PAGE_SIZE)
        self.user_agent = config.get('user_agent')

    def build_url(self, subject: Subject) -> str:
        """
        Append the student id and the page-size override to the query URL.

        The upstream returns only ten courses per page by default, so the
        page size is raised to fetch everything in one request.
        """
        paging = urlencode({
            'queryModel.showCount': self.page_size,
            'queryModel.currentPage': 1,
        })
        return f"{self.request_url}{quote(subject.subject_id)}&{paging}"

    def build_headers(self, subject: Subject) -> Dict[str, str]:
        headers = dict(DEFAULT_HEADERS)
        headers['Cookie'] = subject.credential
        if self.user_agent:
            headers['User-Agent'] = self.user_agent
        return headers

    def fetch(self, subject: Subject) -> FetchResult:
        url = self.build_url(subject)
        self.logger.info(f"Querying grades for {subject.subject_id}")

        result = self.client.post(url, headers=self.build_headers(subject))
        if not result.is_success:
            self.handle_error(subject, result)
        return result
