from __future__ import annotations


class ChainRegistryError(Exception):
    status_code = 500

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        if status_code is not None:
            self.status_code = status_code
        self.detail = detail


class FetchError(ChainRegistryError):
    status_code = 502

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f'failed to fetch {url}: {reason}')
        self.url = url
        self.reason = reason


class ParseError(ChainRegistryError):
    status_code = 502


class AssetFetchError(ChainRegistryError):
    status_code = 502

    def __init__(self, name: str, url: str, reason: str) -> None:
        super().__init__(f'failed to fetch logo asset {name} from {url}: {reason}')
        self.name = name
        self.url = url


class Unauthorized(ChainRegistryError):
    status_code = 401

    def __init__(self, detail: str = 'Unauthorized') -> None:
        super().__init__(detail)
