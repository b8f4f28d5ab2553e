"""Protocol Logger - Colored console output for matchmaking traffic.

Green lines for events received from and operations sent to the server,
orange for phase transitions and the gameplay hand-off, red for errors.
"""
from datetime import datetime
from typing import Optional


class Colors:
    """ANSI color codes for terminal output."""
    GREEN = "\033[92m"
    ORANGE = "\033[93m"  # Using yellow/orange
    RED = "\033[91m"
    RESET = "\033[0m"
    BOLD = "\033[1m"


# Wire name to display name mapping
EVENT_DISPLAY_NAMES = {
    # Events the client RECEIVES
    "player-created": "PARTICIPANT-CREATED",
    "room-joined": "ROOM-JOINED",
    "player-joined-room": "PARTICIPANT-JOINED",
    "player-ready": "PARTICIPANT-READY",
    "left-room": "LEFT-ROOM",
    "error": "SERVER-ERROR",
    # Operations the client SENDS
    "find-match": "REQUEST-MATCH",
    "cancel-matchmaking": "CANCEL-MATCH",
}

# What the client waits for next after each event or operation
EXPECTED_NEXT = {
    "player-created": "REQUEST-MATCH",
    "find-match": "ROOM-JOINED",
    "room-joined": "PARTICIPANT-JOINED or READY",
    "player-joined-room": "PARTICIPANT-READY",
    "player-ready": "HAND-OFF",
    "cancel-matchmaking": "None (idle)",
    "left-room": "None (idle)",
    "error": "None",
}


class ProtocolLogger:
    """Logger for session traffic with colored output."""

    _session_id: Optional[int] = None
    _position: str = "unassigned"

    @classmethod
    def set_session_context(
        cls, session_id: Optional[int], position: str = "unassigned"
    ) -> None:
        """Set current session context for logging."""
        cls._session_id = session_id
        cls._position = position or "unassigned"

    @classmethod
    def _get_display_name(cls, event: str) -> str:
        """Get display name for an event, tolerating '_' for '-'."""
        if event in EVENT_DISPLAY_NAMES:
            return EVENT_DISPLAY_NAMES[event]
        normalized = event.replace("_", "-").lower()
        return EVENT_DISPLAY_NAMES.get(normalized, event.upper())

    @classmethod
    def _get_expected_next(cls, event: str) -> str:
        normalized = event.replace("_", "-").lower()
        return EXPECTED_NEXT.get(normalized, "Unknown")

    @classmethod
    def _format_session(cls) -> str:
        if cls._session_id is None:
            return "----"
        return f"{cls._session_id:04d}"

    @classmethod
    def _format_time(cls, with_ms: bool = False) -> str:
        """Format current time."""
        now = datetime.now()
        if with_ms:
            return now.strftime("%H:%M:%S:%f")[:-3]  # HH:MM:SS:MS
        return now.strftime("%H:%M:%S")

    @classmethod
    def format_received(cls, event: str, source: str) -> str:
        return (
            f"{cls._format_time()} | SESSION: {cls._format_session()} | RECEIVED | "
            f"from {source:<30} | {cls._get_display_name(event):<20} | "
            f"EXPECTED-NEXT: {cls._get_expected_next(event):<28} | "
            f"POSITION: {cls._position}"
        )

    @classmethod
    def format_sent(cls, event: str, destination: str) -> str:
        return (
            f"{cls._format_time()} | SESSION: {cls._format_session()} | SENT     | "
            f"to {destination:<32} | {cls._get_display_name(event):<20} | "
            f"EXPECTED-NEXT: {cls._get_expected_next(event):<28} | "
            f"POSITION: {cls._position}"
        )

    @classmethod
    def log_received(cls, event: str, source: str = "server") -> None:
        """Log a received server event (GREEN)."""
        print(f"{Colors.GREEN}{cls.format_received(event, source)}{Colors.RESET}")

    @classmethod
    def log_sent(cls, event: str, destination: str = "server") -> None:
        """Log an outbound operation (GREEN)."""
        print(f"{Colors.GREEN}{cls.format_sent(event, destination)}{Colors.RESET}")

    @classmethod
    def log_transition(cls, old_phase: str, new_phase: str) -> None:
        """Log a phase transition (ORANGE)."""
        time_str = cls._format_time(with_ms=True)
        print(
            f"{Colors.ORANGE}"
            f"{time_str} | SESSION: {cls._format_session()} | PHASE    | "
            f"{old_phase} -> {new_phase}"
            f"{Colors.RESET}"
        )

    @classmethod
    def log_hand_off(cls, mode: str, trigger: str) -> None:
        """Log the gameplay hand-off (ORANGE)."""
        time_str = cls._format_time(with_ms=True)
        print(
            f"{Colors.ORANGE}"
            f"{time_str} | SESSION: {cls._format_session()} | HAND-OFF | "
            f"MODE: {mode} | TRIGGER: {trigger} | POSITION: {cls._position}"
            f"{Colors.RESET}"
        )

    @classmethod
    def log_rejected(cls, event: str, reason: str = "") -> None:
        """Log a discarded event (RED)."""
        time_str = cls._format_time()
        msg = f"DISCARDED {cls._get_display_name(event)}"
        if reason:
            msg += f": {reason}"
        print(f"{Colors.RED}[ERROR] {time_str} | {msg}{Colors.RESET}")

    @classmethod
    def log_error(cls, message: str) -> None:
        """Log an error message (RED)."""
        time_str = cls._format_time()
        print(f"{Colors.RED}[ERROR] {time_str} | {message}{Colors.RESET}")


# Convenience functions
def log_received(event: str, source: str = "server") -> None:
    ProtocolLogger.log_received(event, source)


def log_sent(event: str, destination: str = "server") -> None:
    ProtocolLogger.log_sent(event, destination)


def log_transition(old_phase: str, new_phase: str) -> None:
    ProtocolLogger.log_transition(old_phase, new_phase)


def log_hand_off(mode: str, trigger: str) -> None:
    ProtocolLogger.log_hand_off(mode, trigger)


def log_rejected(event: str, reason: str = "") -> None:
    ProtocolLogger.log_rejected(event, reason)


def log_error(message: str) -> None:
    ProtocolLogger.log_error(message)


def set_session_context(session_id: Optional[int], position: str = "unassigned") -> None:
    ProtocolLogger.set_session_context(session_id, position)
