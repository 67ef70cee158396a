"""
Tests for StateBridge Runtime.
"""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from statebridge.core.config_manager import StateBridgeConfig
from statebridge.core.runtime import StateBridgeRuntime, create_app
from statebridge.state import StateClient


@pytest.fixture
def runtime():
    """Create a StateBridge runtime instance."""
    return StateBridgeRuntime()


class TestStateBridgeRuntime:
    """Test suite for StateBridgeRuntime."""

    def test_initialize(self, runtime):
        """Test runtime initialization."""
        app = runtime.initialize(configure_logging=False)

        assert isinstance(app, FastAPI)
        assert runtime.app is app
        assert isinstance(runtime.config, StateBridgeConfig)

    def test_initialize_idempotent(self, runtime):
        """Test that initialization is idempotent."""
        first = runtime.initialize(configure_logging=False)
        second = runtime.initialize(configure_logging=False)

        assert first is second

    def test_initialize_with_config_file(self, runtime, tmp_path):
        """Test initialization with config file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("""
version: "1.0.0"
state:
  endpoint: "http://sidecar:3600/v1.0"
""")

        runtime.initialize(config_file=str(config_file), configure_logging=False)

        assert runtime.config.version == "1.0.0"
        assert runtime.config.state.endpoint == "http://sidecar:3600/v1.0"

    def test_initialize_with_cli_overrides(self, runtime):
        """Test initialization with CLI overrides."""
        runtime.initialize(
            cli_overrides={"server": {"port": 9999}},
            configure_logging=False
        )

        assert runtime.config.server.port == 9999

    def test_default_state_service_is_sidecar_client(self, runtime):
        """Test the sidecar client is built from configuration."""
        config = StateBridgeConfig(state={"endpoint": "http://sidecar:3500/v1.0", "timeout_seconds": 2})

        app = runtime.initialize(config=config, configure_logging=False)

        service = app.state.state_service
        assert isinstance(service, StateClient)
        assert service.endpoint == "http://sidecar:3500/v1.0"
        assert service.timeout == 2.0

    def test_app_before_initialize(self, runtime):
        """Test accessing the app before initialization."""
        with pytest.raises(RuntimeError):
            runtime.app

    def test_config_before_initialize(self, runtime):
        """Test accessing the config before initialization."""
        with pytest.raises(RuntimeError):
            runtime.config


class TestHealthStatus:
    """Test suite for health reporting."""

    def test_health_before_initialize(self, runtime):
        """Test health status of an uninitialized runtime."""
        health = runtime.get_health_status()

        assert health["status"] == "unhealthy"
        assert health["version"] == "unknown"

    def test_health_after_initialize(self, runtime):
        """Test health status after initialization."""
        runtime.initialize(configure_logging=False)

        health = runtime.get_health_status()

        assert health["status"] == "healthy"
        assert health["version"] == "0.1.0"
        assert health["state_endpoint"] == "http://localhost:3500/v1.0"
        assert health["uptime"] >= 0
        assert "timestamp" in health

    def test_health_endpoint(self):
        """Test the /health route."""
        client = TestClient(create_app(config=StateBridgeConfig(), configure_logging=False))

        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestCreateApp:
    """Test suite for the application factory."""

    def test_routes_registered(self):
        """Test the account routes and health check are mounted."""
        app = create_app(config=StateBridgeConfig(), configure_logging=False)
        client = TestClient(app)

        # Validation failures prove the route matched without reaching the store
        assert client.post("/account", json={}).status_code == 422
        assert client.get("/account/abc").status_code == 422
        assert client.delete("/account/abc").status_code == 422
        assert client.get("/health").status_code == 200
        assert client.get("/accounts").status_code == 404

    def test_routes_documented(self):
        """Test the account operations appear in the OpenAPI document."""
        paths = create_app(config=StateBridgeConfig(), configure_logging=False).openapi()["paths"]

        assert set(paths["/account"]) == {"post"}
        assert set(paths["/account/{account_id}"]) == {"get", "delete"}

    def test_each_call_builds_new_app(self):
        """Test the factory does not share state between apps."""
        config = StateBridgeConfig()

        assert create_app(config=config, configure_logging=False) is not create_app(
            config=config, configure_logging=False
        )
