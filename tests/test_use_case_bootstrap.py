from unittest.mock import MagicMock, patch

from use_cases import bootstrap


def test_build_session_controller_wires_store_and_gateway(tmp_path) -> None:
    controller = bootstrap.build_session_controller(
        db_path=str(tmp_path / "session.db"), base_url="http://api.test"
    )
    assert controller.state == "UNAUTHENTICATED"
    assert controller.gateway.base_url == "http://api.test"
    assert controller.store.read_persisted_credential() is None


@patch("use_cases.bootstrap.build_session_controller")
def test_run_startup_builds_and_restores_once(mock_build) -> None:
    controller = MagicMock()
    mock_build.return_value = controller
    bootstrap.session_manager.st.session_state.clear()

    first = bootstrap.run_startup()
    second = bootstrap.run_startup()

    assert first.status == "CONTINUE"
    assert first.planned_steps == ("init_session_state", "build_session_controller", "restore_session")
    assert second.planned_steps == ("init_session_state",)
    mock_build.assert_called_once()
    controller.initialize.assert_called_once()
    assert bootstrap.session_manager.st.session_state.session_controller is controller


def test_run_startup_init_happens_before_restore() -> None:
    order = []
    controller = MagicMock()
    controller.initialize.side_effect = lambda: order.append("restore_session")
    bootstrap.session_manager.st.session_state.clear()
    real_init = bootstrap.session_manager.init_session_state

    def track_init():
        order.append("init_session_state")
        real_init()

    def track_build():
        order.append("build_session_controller")
        return controller

    with patch("use_cases.bootstrap.session_manager.init_session_state", side_effect=track_init), patch(
        "use_cases.bootstrap.build_session_controller", side_effect=track_build
    ):
        result = bootstrap.run_startup()

    assert result.status == "CONTINUE"
    assert order == ["init_session_state", "build_session_controller", "restore_session"]


@patch("use_cases.bootstrap.build_session_controller", side_effect=RuntimeError("migration failed"))
def test_run_startup_stops_when_store_unavailable(_mock_build) -> None:
    bootstrap.session_manager.st.session_state.clear()

    result = bootstrap.run_startup()

    assert result.status == "STOP"
    assert bootstrap.session_manager.st.session_state.session_controller is None
