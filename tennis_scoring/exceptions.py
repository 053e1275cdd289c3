class MatchValidationError(ValueError):
    pass


class InvalidSetCountError(MatchValidationError):
    pass


class ParticipantMismatchError(MatchValidationError):
    pass


class InvalidWinnerCodeError(MatchValidationError):
    pass


class InvalidOutcomeError(MatchValidationError):
    pass


class SnapshotError(MatchValidationError):
    pass
