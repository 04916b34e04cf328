import pytest
from pydantic import ValidationError

from wmlink.config.schema import ClientConfig


class TestClientConfig:
    def test_defaults(self) -> None:
        config = ClientConfig()
        assert config.socket_path is None
        assert config.log_level == "WARNING"
        assert config.indent == 4

    def test_log_level_case_insensitive(self) -> None:
        assert ClientConfig(log_level="info").log_level == "INFO"

    def test_unknown_log_level(self) -> None:
        with pytest.raises(ValidationError):
            ClientConfig(log_level="verbose")

    def test_indent_range(self) -> None:
        with pytest.raises(ValidationError, match="indent"):
            ClientConfig(indent=17)
        assert ClientConfig(indent=0).indent == 0

    def test_blank_socket_path(self) -> None:
        with pytest.raises(ValidationError, match="socket_path"):
            ClientConfig(socket_path="   ")
