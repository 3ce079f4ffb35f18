"""CLI entry point for querying a running CEP Finder server."""
import argparse
from http import HTTPStatus
from typing import List, Optional
import requests
from pydantic import ValidationError
from cepfinder.config import get_settings
from cepfinder.core.exceptions import QueryClientError
from cepfinder.lookup.models import ResultEnvelope


class QueryClient:
    """
    Sends one lookup to the server and decodes the envelope.

    The session only needs a requests-style ``get``, so tests can pass a
    mock or a FastAPI TestClient.
    """

    def __init__(
        self,
        base_url: str,
        lookup_path: str = "/consulta",
        session: Optional[requests.Session] = None,
        timeout: float = 5.0,
    ):
        self.base_url = base_url.rstrip("/")
        self.lookup_path = lookup_path
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def lookup_url(self) -> str:
        return f"{self.base_url}{self.lookup_path}"

    def lookup(self, cep: str) -> ResultEnvelope:
        """
        Query the server for ``cep``.

        Args:
            cep: Code to look up

        Returns:
            ResultEnvelope: Envelope returned by the server

        Raises:
            QueryClientError: On transport failure, non-200 status, or an
                undecodable body
        """
        try:
            response = self.session.get(
                self.lookup_url, params={"cep": cep}, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise QueryClientError(f"error calling the server: {e}") from e

        if response.status_code != HTTPStatus.OK:
            raise QueryClientError(
                f"server error: {response.status_code} {_reason(response.status_code)}"
            )

        try:
            return ResultEnvelope.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise QueryClientError(f"error decoding response: {e}") from e


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def render_envelope(envelope: ResultEnvelope) -> List[str]:
    """
    Format an envelope for display.

    Args:
        envelope: Envelope to render

    Returns:
        List[str]: Output lines
    """
    lines = [f"Response received from: {envelope.source}"]
    for key, value in (envelope.data or {}).items():
        lines.append(f"  {key}: {value}")
    if envelope.error:
        lines.append(f"  error: {envelope.error}")
    return lines


def run_query(cep: str, client: QueryClient) -> bool:
    """
    Look up ``cep`` and print the result or a single error line.

    Returns:
        bool: True if an envelope was printed
    """
    try:
        envelope = client.lookup(cep)
    except QueryClientError as e:
        print(f"Error: {e}")
        return False

    for line in render_envelope(envelope):
        print(line)
    return True


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="cepfinder-query",
        description="Resolve a CEP through a running CEP Finder server.",
    )
    parser.add_argument("cep", nargs="?", help="postal code to look up")
    parser.add_argument(
        "--server",
        default=settings.SERVER_URL,
        help=f"server base URL (default: {settings.SERVER_URL})",
    )
    args = parser.parse_args(argv)

    if not args.cep:
        print("Usage: cepfinder-query <CEP>")
        return

    client = QueryClient(
        args.server,
        lookup_path=f"{settings.API_PREFIX}{settings.LOOKUP_PATH}",
        timeout=settings.CLIENT_TIMEOUT_SECONDS,
    )
    run_query(args.cep, client)


if __name__ == "__main__":
    main()
