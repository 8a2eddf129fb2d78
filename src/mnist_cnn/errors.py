class TrainingError(Exception):
    """Base class for fatal errors raised by a training run."""


class ConfigurationError(TrainingError):
    """The run cannot start or continue with the given data or settings."""


class ShapeMismatchError(ConfigurationError, ValueError):
    """A batch does not have the shape the network was built for."""


class DivergenceError(TrainingError, ArithmeticError):
    """The training loss stopped being a finite number."""

    def __init__(self, epoch, batch_idx, loss):
        self.epoch = epoch
        self.batch_idx = batch_idx
        self.loss = loss
        super().__init__(
            f"Non-finite loss {loss} at epoch {epoch}, batch {batch_idx}"
        )
