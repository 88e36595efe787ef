# SPDX-License-Identifier: GPL-3.0-or-later
import logging
import os
import re
import time
from typing import Any, Dict, List, Optional, Type, TypeVar

import requests

from ..exceptions import AuthenticationError, ConfigurationError
from .exceptions import EntityNotFound, TaskError, VCDError
from .models import Org, Rde, RdeType, Task, VApp, Vdc, VCDCredentials

log = logging.getLogger("capvcd.cleanup")
http_log = logging.getLogger("capvcd.http")

API_VERSION = os.getenv("VCD_API_VERSION", "37.0")
TASK_POLL_INTERVAL = float(os.getenv("VCD_TASK_POLL_INTERVAL", "3"))
RDE_PAGE_SIZE = 128

VDC_MEDIA_TYPE = "vnd.vmware.vcloud.vdc+"
VAPP_MEDIA_TYPE = "vnd.vmware.vcloud.vApp+"

REDACTED = "<redacted>"
SECRET_HEADERS = ("authorization", "x-vmware-vcloud-access-token", "x-vcloud-authorization")
SECRET_BODY_PATTERNS = (
    re.compile(r'("(?:access|refresh)_token"\s*:\s*")[^"]*'),
    re.compile(r"((?:access|refresh)_token=)[^&]*"),
)

M = TypeVar("M", Org, Vdc, VApp, RdeType, Rde, Task)


def _redact_headers(headers: Any) -> Dict[str, str]:
    return {
        key: (REDACTED if key.lower() in SECRET_HEADERS else value)
        for key, value in (headers or {}).items()
    }


def _redact_body(body: Any) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    body = str(body)
    for pattern in SECRET_BODY_PATTERNS:
        body = pattern.sub(r"\1" + REDACTED, body)
    return body


class VCDClient:
    """Client for the VMware Cloud Director legacy API and OpenAPI (cloudapi)."""

    def __init__(
        self,
        credentials: VCDCredentials,
        verbose: bool = False,
        poll_interval: Optional[float] = None,
        **kwargs,
    ) -> None:
        """Create a new VCD client.

        The client is not authenticated until :meth:`authenticate` is called,
        see :meth:`from_credentials`.

        Args:
            credentials (VCDCredentials)
                The VCD URL, organization and API token.
            verbose (bool, optional)
                Log every request and response sent to VCD.
            poll_interval (float, optional)
                Seconds to sleep between task status checks.
                Mainly provided so that tests can avoid waiting.
            kwargs
                Remaining arguments are used to initialize the requests.Session()
                used within this class (e.g. "verify", "proxies").
        """
        self._creds = credentials
        self._verbose = verbose
        self._poll_interval = TASK_POLL_INTERVAL if poll_interval is None else poll_interval
        self._access_token: Optional[str] = None

        self._session = requests.Session()
        for key, value in kwargs.items():
            setattr(self._session, key, value)
        if verbose:
            self._session.hooks["response"].append(self._log_exchange)

    @classmethod
    def from_credentials(cls, auth_data: Dict[str, Any], **kwargs) -> "VCDClient":
        """
        Create an authenticated client from the given credentials.

        Args:
            auth_data (dict)
                Dictionary with the ``url``, ``org`` and ``token`` keys.
            kwargs
                Remaining arguments are passed to the client constructor.
        Returns:
            The authenticated VCDClient.
        Raises:
            ConfigurationError: the credentials are malformed.
            AuthenticationError: VCD refused the API token.
        """
        try:
            creds = VCDCredentials(**auth_data)
        except (TypeError, ValueError) as exc:
            raise ConfigurationError(str(exc), stage="configuration") from exc

        client = cls(creds, **kwargs)
        client.authenticate()
        return client

    @property
    def org_name(self) -> str:
        """Return the organization of this session."""
        return self._creds.org

    @property
    def api_url(self) -> str:
        """Return the root of the legacy API."""
        return f"{self._creds.url}/api"

    @property
    def cloudapi_url(self) -> str:
        """Return the root of the OpenAPI."""
        return f"{self._creds.url}/cloudapi/1.0.0"

    @property
    def verbose(self) -> bool:
        """Whether requests and responses are being logged."""
        return self._verbose

    def _log_exchange(self, response: requests.Response, *args, **kwargs) -> None:
        request = response.request
        http_log.info("%s %s -> %s", request.method, request.url, response.status_code)
        if http_log.isEnabledFor(logging.DEBUG):
            http_log.debug("Request headers: %s", _redact_headers(request.headers))
            http_log.debug("Request body: %s", _redact_body(request.body))
            http_log.debug("Response headers: %s", _redact_headers(response.headers))
            http_log.debug("Response body: %s", _redact_body(response.text))

    @staticmethod
    def _check_http_response(response: requests.Response) -> requests.Response:
        if response.ok:
            return response

        message = response.reason or ""
        minor_error_code = None
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("message") or message
            minor_error_code = body.get("minorErrorCode")

        exc_class = EntityNotFound if response.status_code == 404 else VCDError
        raise exc_class(
            f"[{response.status_code}] {message}".strip(),
            status_code=response.status_code,
            minor_error_code=minor_error_code,
        )

    def _headers(self, cloudapi: bool = False) -> Dict[str, str]:
        media_type = "application/json" if cloudapi else "application/*+json"
        headers = {"Accept": f"{media_type};version={API_VERSION}"}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        return headers

    def _request(
        self, method: str, url: str, cloudapi: bool = False, **kwargs
    ) -> requests.Response:
        try:
            response = self._session.request(
                method, url, headers=self._headers(cloudapi), **kwargs
            )
        except requests.RequestException as exc:
            raise VCDError(f"{method} {url} failed: {exc}") from exc
        return self._check_http_response(response)

    @staticmethod
    def _json(response: requests.Response) -> Dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise VCDError(
                f"unexpected response from {response.url}: {exc}",
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise VCDError(
                f"unexpected response from {response.url}: expected a JSON object",
                status_code=response.status_code,
            )
        return data

    @staticmethod
    def _build(model: Type[M], data: Dict[str, Any], url: str) -> M:
        try:
            return model.from_json(data)
        except KeyError as exc:
            raise VCDError(f"unexpected response from {url}: missing field {exc}") from exc
        except (TypeError, ValueError, AttributeError) as exc:
            raise VCDError(f"unexpected response from {url}: {exc}") from exc

    @staticmethod
    def _href(record: Dict[str, Any], url: str) -> str:
        href = record.get("href")
        if not href:
            raise VCDError(
                f"unexpected response from {url}: '{record.get('name')}' has no href"
            )
        return href

    def _get_json(self, url: str, cloudapi: bool = False, **kwargs) -> Dict[str, Any]:
        return self._json(self._request("GET", url, cloudapi=cloudapi, **kwargs))

    def _get_model(self, model: Type[M], url: str, cloudapi: bool = False) -> M:
        return self._build(model, self._get_json(url, cloudapi=cloudapi), url)

    def _refresh(self, model: Type[M], url: str) -> M:
        # A 404 here means the parent vanished, not that the child is absent.
        try:
            return self._get_model(model, url)
        except EntityNotFound as exc:
            raise VCDError(
                f"unable to reload {url}: {exc}",
                status_code=exc.status_code,
                minor_error_code=exc.minor_error_code,
            ) from exc

    def authenticate(self) -> None:
        """
        Exchange the API token for a bearer access token.

        Raises:
            AuthenticationError: the token was rejected or no access token was returned.
        """
        org = self._creds.org
        if org.lower() == "system":
            url = f"{self._creds.url}/oauth/provider/token"
        else:
            url = f"{self._creds.url}/oauth/tenant/{org}/token"

        data = {"grant_type": "refresh_token", "refresh_token": self._creds.token}
        log.debug("Authenticating on %s for org %s", self._creds.url, org)
        try:
            response = self._session.post(url, data=data, headers={"Accept": "application/json"})
            self._check_http_response(response)
            access_token = self._json(response).get("access_token")
        except (requests.RequestException, VCDError, ValueError) as exc:
            raise AuthenticationError(
                f"unable to authenticate with API token on org '{org}': {exc}",
                stage="authentication",
            ) from exc

        if not access_token:
            raise AuthenticationError(
                f"no access token returned for org '{org}'", stage="authentication"
            )
        self._access_token = access_token

    def get_org(self, name: str) -> Org:
        """
        Return the organization with the given name.

        Raises:
            EntityNotFound: no organization with this name is visible.
        """
        url = f"{self.api_url}/org"
        for item in self._get_json(url).get("org") or []:
            if item.get("name") == name:
                return self._get_model(Org, self._href(item, url))
        raise EntityNotFound(f"organization '{name}' not found")

    def get_vdc(self, org: Org, name: str, refresh: bool = False) -> Vdc:
        """
        Return the VDC with the given name from an organization.

        Args:
            org (Org)
                The organization holding the VDC.
            name (str)
                The VDC name.
            refresh (bool, optional)
                Reload the organization document before looking up its VDCs.
        Raises:
            EntityNotFound: the organization has no VDC with this name.
        """
        if refresh:
            org = self._refresh(Org, org.href)

        for link in org.links:
            if (
                link.get("rel") == "down"
                and VDC_MEDIA_TYPE in (link.get("type") or "")
                and link.get("name") == name
            ):
                return self._get_model(Vdc, self._href(link, org.href))
        raise EntityNotFound(f"VDC '{name}' not found in organization '{org.name}'")

    def get_vapp(self, vdc: Vdc, name: str, refresh: bool = True) -> VApp:
        """
        Return the vApp with the given name from a VDC.

        Args:
            vdc (Vdc)
                The VDC holding the vApp.
            name (str)
                The vApp name.
            refresh (bool, optional)
                Reload the VDC document before looking up its vApps.
        Raises:
            EntityNotFound: the VDC has no vApp with this name.
            VCDError: the VDC could not be reloaded, even if it no longer exists.
        """
        if refresh:
            vdc = self._refresh(Vdc, vdc.href)

        for entity in vdc.resource_entities:
            if VAPP_MEDIA_TYPE in (entity.get("type") or "") and entity.get("name") == name:
                return self._get_model(VApp, self._href(entity, vdc.href))
        raise EntityNotFound(f"vApp '{name}' not found in VDC '{vdc.name}'")

    def delete_vapp(self, vapp: VApp) -> Task:
        """Request the deletion of a vApp and return the deletion task."""
        response = self._request("DELETE", vapp.href)
        return self._build(Task, self._json(response), vapp.href)

    def wait_task(self, task: Task) -> Task:
        """
        Block until the task reaches a terminal state.

        Returns:
            The finished task.
        Raises:
            TaskError: the task finished without success.
        """
        while not task.done:
            log.debug(
                "Task %s is %s, checking again in %ss", task.href, task.status, self._poll_interval
            )
            time.sleep(self._poll_interval)
            task = self._get_model(Task, task.href)

        if not task.succeeded:
            raise TaskError(
                f"task {task.href} finished with status '{task.status}': "
                f"{task.error_message or 'no error details'}"
            )
        return task

    def get_rde_type(self, vendor: str, nss: str, version: str) -> RdeType:
        """
        Return the Runtime Defined Entity type for the given vendor, nss and version.

        Raises:
            EntityNotFound: the type is not registered.
        """
        urn = f"urn:vcloud:type:{vendor}:{nss}:{version}"
        return self._get_model(RdeType, f"{self.cloudapi_url}/entityTypes/{urn}", cloudapi=True)

    def get_rdes_by_name(self, rde_type: RdeType, name: str) -> List[Rde]:
        """
        Return every entity of the given type with the given name.

        Raises:
            EntityNotFound: no entity has this name.
        """
        url = (
            f"{self.cloudapi_url}/entities/types/"
            f"{rde_type.vendor}/{rde_type.nss}/{rde_type.version}"
        )
        rdes: List[Rde] = []

        def handle_page(page: int = 1):
            params = {"filter": f"name=={name}", "page": page, "pageSize": RDE_PAGE_SIZE}
            data = self._get_json(url, cloudapi=True, params=params)
            rdes.extend(self._build(Rde, item, url) for item in data.get("values") or [])
            if page < int(data.get("pageCount") or 0):
                handle_page(page + 1)

        log.debug("Listing %s entities named %s", rde_type.id, name)
        handle_page()
        if not rdes:
            raise EntityNotFound(f"no {rde_type.id} entity named '{name}'")
        return rdes

    def delete_rde(self, rde: Rde) -> None:
        """Delete a Runtime Defined Entity."""
        self._request("DELETE", f"{self.cloudapi_url}/entities/{rde.id}", cloudapi=True)
