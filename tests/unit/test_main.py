"""Unit tests for the uvicorn entry point."""

import pytest
from pytest_mock import MockerFixture

import main


@pytest.mark.unit
class TestMain:
    def test_runs_configured_app(
        self, mocker: MockerFixture, isolated_env: pytest.MonkeyPatch
    ) -> None:
        # Arrange
        run = mocker.patch("main.uvicorn.run")
        mocker.patch("main.setup_logging")
        isolated_env.setenv("DEBUG", "false")

        # Act
        main.main()

        # Assert
        run.assert_called_once_with(
            "src.api.main:app",
            host="127.0.0.1",
            port=8080,
            reload=False,
            log_config=main.UVICORN_LOG_CONFIG,
        )

    def test_port_environment_variable(
        self, mocker: MockerFixture, isolated_env: pytest.MonkeyPatch
    ) -> None:
        run = mocker.patch("main.uvicorn.run")
        mocker.patch("main.setup_logging")
        isolated_env.setenv("PORT", "9000")

        main.main()

        assert run.call_args.kwargs["port"] == 9000

    def test_debug_enables_reload(
        self, mocker: MockerFixture, isolated_env: pytest.MonkeyPatch
    ) -> None:
        run = mocker.patch("main.uvicorn.run")
        mocker.patch("main.setup_logging")
        isolated_env.setenv("DEBUG", "true")

        main.main()

        assert run.call_args.kwargs["reload"] is True

    def test_uvicorn_loggers_are_intercepted(self) -> None:
        loggers = main.UVICORN_LOG_CONFIG["loggers"]

        assert set(loggers) == {"uvicorn", "uvicorn.error", "uvicorn.access"}
