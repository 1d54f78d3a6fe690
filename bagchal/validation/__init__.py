from .board_checks import BoardInvariantError, is_valid_board, validate_board

__all__ = ["BoardInvariantError", "is_valid_board", "validate_board"]
