"""Pure message preprocessing."""

from .message_builder import build_first_pass_messages, build_synthesis_messages, render_user_turn

__all__ = ["build_first_pass_messages", "build_synthesis_messages", "render_user_turn"]
