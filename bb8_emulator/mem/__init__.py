# RAM board.
