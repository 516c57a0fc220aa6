"""Unit tests for the mFi HTTP client."""

from unittest.mock import Mock, patch

import pytest
import requests

from mfictl.core.exceptions import ProtocolError, TransportError, transport_code
from mfictl.core.models import Credentials, DeviceTarget
from mfictl.device.client import MfiClient
from mfictl.device.session import Session

SESSION_ID = "12345678901234567890123456789012"


def _response(body):
    """Build a fake response returning a JSON body."""
    response = Mock()
    response.json.return_value = body
    response.text = str(body)
    return response


def _sensors(*entries, status="success"):
    return _response({"sensors": list(entries), "status": status})


@pytest.fixture
def session():
    """Session against a test device."""
    return Session(SESSION_ID, DeviceTarget("192.168.1.60"))


class TestLogin:
    """Tests for login."""

    @patch("mfictl.device.client.requests.request")
    def test_login_request(self, mock_request, session):
        """Test login posts credentials with the session cookie."""
        mock_request.return_value = Mock()

        MfiClient().login(session, Credentials("admin", "secret"))

        mock_request.assert_called_once_with(
            "POST",
            "http://192.168.1.60/login.cgi",
            data={"username": "admin", "password": "secret"},
            cookies={"AIROS_SESSIONID": SESSION_ID},
            timeout=None,
        )

    @patch("mfictl.device.client.requests.request")
    def test_login_ignores_body(self, mock_request, session):
        """Test login does not judge the reply."""
        response = Mock()
        response.json.side_effect = ValueError("not json")
        mock_request.return_value = response

        MfiClient().login(session, Credentials())

    @patch("mfictl.device.client.requests.request")
    def test_login_transport_failure(self, mock_request, session):
        """Test connection failure raises TransportError with curl code 7."""
        mock_request.side_effect = requests.ConnectionError("Connection refused")

        with pytest.raises(TransportError) as exc_info:
            MfiClient().login(session, Credentials("admin", "secret"))

        error = exc_info.value
        assert error.exit_code == 7
        assert "Login to 192.168.1.60" in error.message
        assert SESSION_ID in error.message
        assert "secret" not in error.message

    @patch("mfictl.device.client.requests.request")
    def test_timeout_passed_through(self, mock_request, session):
        """Test configured timeout reaches requests."""
        mock_request.return_value = Mock()

        MfiClient(timeout=3.0).login(session, Credentials())

        assert mock_request.call_args[1]["timeout"] == 3.0


class TestLogout:
    """Tests for logout."""

    @patch("mfictl.device.client.requests.request")
    def test_logout_request(self, mock_request, session):
        """Test logout is a GET with the session cookie."""
        mock_request.return_value = Mock()

        MfiClient().logout(session)

        call_args = mock_request.call_args
        assert call_args[0] == ("GET", "http://192.168.1.60/logout.cgi")
        assert call_args[1]["cookies"] == {"AIROS_SESSIONID": SESSION_ID}

    @patch("mfictl.device.client.requests.request")
    def test_logout_timeout(self, mock_request, session):
        """Test timeout maps to curl code 28."""
        mock_request.side_effect = requests.Timeout("timed out")

        with pytest.raises(TransportError) as exc_info:
            MfiClient().logout(session)

        assert exc_info.value.exit_code == 28
        assert exc_info.value.message.startswith("Logout from 192.168.1.60")


class TestGetStatus:
    """Tests for get_status."""

    @patch("mfictl.device.client.requests.request")
    def test_selects_port(self, mock_request, session):
        """Test the reading for the requested port is returned."""
        mock_request.return_value = _sensors(
            {"port": 1, "output": 0, "dimmer_level": 10, "dimmer_mode": "dimmer"},
            {"port": 2, "output": 1, "dimmer_level": 100, "dimmer_mode": "switch"},
        )

        reading = MfiClient().get_status(session, 2)

        assert reading.port == 2
        assert reading.is_on
        assert reading.dimmer_mode == "switch"
        assert mock_request.call_args[0] == ("GET", "http://192.168.1.60/sensors")

    @patch("mfictl.device.client.requests.request")
    def test_non_success_status(self, mock_request, session):
        """Test a non-success status raises ProtocolError."""
        mock_request.return_value = _sensors(status="error")

        with pytest.raises(ProtocolError) as exc_info:
            MfiClient().get_status(session, 1)

        assert exc_info.value.exit_code == 1
        assert 'not success: "error"' in exc_info.value.message
        assert "Status retrieval from 192.168.1.60" in exc_info.value.message

    @patch("mfictl.device.client.requests.request")
    def test_invalid_json(self, mock_request, session):
        """Test an HTML error page raises ProtocolError."""
        response = Mock()
        response.json.side_effect = ValueError("Expecting value")
        response.text = "<html>login required</html>"
        mock_request.return_value = response

        with pytest.raises(ProtocolError, match="invalid JSON"):
            MfiClient().get_status(session, 1)

    @patch("mfictl.device.client.requests.request")
    def test_missing_port(self, mock_request, session):
        """Test asking for a port the device does not report."""
        mock_request.return_value = _sensors(
            {"port": 1, "output": 0, "dimmer_level": 10, "dimmer_mode": "dimmer"},
        )

        with pytest.raises(ProtocolError, match="port 3 not reported"):
            MfiClient().get_status(session, 3)

    @patch("mfictl.device.client.requests.request")
    def test_malformed_entry(self, mock_request, session):
        """Test a sensor entry without output raises ProtocolError."""
        mock_request.return_value = _sensors({"port": 1})

        with pytest.raises(ProtocolError, match="malformed sensor entry"):
            MfiClient().get_status(session, 1)

    @patch("mfictl.device.client.requests.request")
    def test_transport_failure(self, mock_request, session):
        """Test transport failure during status raises TransportError."""
        mock_request.side_effect = requests.ConnectionError("Connection reset")

        with pytest.raises(TransportError, match="Status retrieval from"):
            MfiClient().get_status(session, 1)


class TestTurnOnOff:
    """Tests for turn_on and turn_off."""

    @patch("mfictl.device.client.requests.request")
    def test_turn_on_requests(self, mock_request, session):
        """Test ON forces switch mode, then sets output and relay."""
        mock_request.return_value = _response({"status": "success"})

        MfiClient().turn_on(session, 1, 40)

        calls = mock_request.call_args_list
        assert len(calls) == 2
        assert calls[0][0] == ("PUT", "http://192.168.1.60/sensors/1")
        assert calls[0][1]["data"] == {"dimmer_mode": "switch"}
        assert calls[1][0] == ("PUT", "http://192.168.1.60/sensors/1")
        assert calls[1][1]["data"] == {"output": 1, "relay": 1}

    @patch("mfictl.device.client.requests.request")
    def test_turn_on_does_not_send_dim_level(self, mock_request, session):
        """Test the dim level never reaches the device."""
        mock_request.return_value = _response({"status": "success"})

        MfiClient().turn_on(session, 1, 40)

        for call in mock_request.call_args_list:
            assert "dimmer_level" not in call[1]["data"]
            assert 40 not in call[1]["data"].values()

    @patch("mfictl.device.client.requests.request")
    def test_turn_off_requests(self, mock_request, session):
        """Test OFF forces switch mode, then clears output and relay."""
        mock_request.return_value = _response({"status": "success"})

        MfiClient().turn_off(session, 2)

        calls = mock_request.call_args_list
        assert len(calls) == 2
        assert calls[0][0][1] == "http://192.168.1.60/sensors/2"
        assert calls[0][1]["data"] == {"dimmer_mode": "switch"}
        assert calls[1][1]["data"] == {"output": 0, "relay": 0}

    @patch("mfictl.device.client.requests.request")
    def test_only_output_reply_is_checked(self, mock_request, session):
        """Test a failed mode reply is tolerated when the output update succeeds."""
        mock_request.side_effect = [
            _response({"status": "error"}),
            _response({"status": "success"}),
        ]

        MfiClient().turn_on(session, 1)

    @patch("mfictl.device.client.requests.request")
    def test_turn_off_non_success(self, mock_request, session):
        """Test non-success output reply raises ProtocolError."""
        mock_request.return_value = _response({"status": "error"})

        with pytest.raises(ProtocolError, match="Turning off 192.168.1.60"):
            MfiClient().turn_off(session, 1)

    @patch("mfictl.device.client.requests.request")
    def test_turn_on_missing_status(self, mock_request, session):
        """Test a reply without status raises ProtocolError."""
        mock_request.return_value = _response({})

        with pytest.raises(ProtocolError, match="not success: no status"):
            MfiClient().turn_on(session, 1)

    @patch("mfictl.device.client.requests.request")
    def test_mode_transport_failure(self, mock_request, session):
        """Test transport failure on the first PUT stops the operation."""
        mock_request.side_effect = requests.ConnectionError("Connection refused")

        with pytest.raises(TransportError, match="Turning on"):
            MfiClient().turn_on(session, 1)

        assert mock_request.call_count == 1


class TestTransportCode:
    """Tests for curl-compatible exit codes."""

    def test_codes(self):
        """Test requests exceptions map to curl exit codes."""
        assert transport_code(requests.ConnectTimeout("slow")) == 28
        assert transport_code(requests.ReadTimeout("slow")) == 28
        assert transport_code(requests.exceptions.InvalidURL("bad")) == 3
        assert transport_code(requests.TooManyRedirects("loop")) == 47
        assert transport_code(requests.ConnectionError("refused")) == 7
        assert transport_code(requests.RequestException("other")) == 1

    def test_name_resolution(self):
        """Test DNS failures map to curl code 6."""
        error = requests.ConnectionError(
            "Failed to resolve 'nodevice.invalid' "
            "(NameResolutionError: [Errno -2] Name or service not known)"
        )
        assert transport_code(error) == 6
