from dataclasses import dataclass


@dataclass(frozen=True)
class RunConfig:
    """Constants for one training run.

    Built before the model and optimizer so that the same seed gives the
    same run. Use ``dataclasses.replace`` to derive a variant.
    """

    # where torchvision looks for <Folder>/raw/*-ubyte
    data_root: str = "build/mnist"
    dataset: str = "mnist"

    train_batch_size: int = 64
    test_batch_size: int = 1000
    epochs: int = 10

    # batches between two progress lines
    log_interval: int = 10

    lr: float = 0.01
    momentum: float = 0.5

    mean: float = 0.1307
    std: float = 0.3081

    seed: int = 1
    num_workers: int = 0
