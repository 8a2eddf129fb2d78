from mnist_cnn.config import RunConfig
from mnist_cnn.model import Net
from mnist_cnn.test import EvalResult, Tester
from mnist_cnn.train import Trainer

__version__ = "0.1.0"
