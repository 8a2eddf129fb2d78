import torch
import torch.nn as nn
import torch.nn.functional as F

from mnist_cnn.errors import ShapeMismatchError

FLAT_FEATURES = 320


class SeededDropout(nn.Module):
    """
    Dropout whose masks come from an explicit torch.Generator.

    With ``spatial=True`` whole channels of a (N, C, H, W) input are zeroed,
    as in nn.Dropout2d. Inert in eval mode.
    """

    def __init__(self, p=0.5, spatial=False, generator=None):
        super().__init__()
        if not 0.0 <= p < 1.0:
            raise ValueError(f"Dropout probability must be in [0, 1), got {p}")
        self.p = p
        self.spatial = spatial
        self.generator = generator

    def forward(self, x):
        if not self.training or self.p == 0.0:
            return x

        if self.spatial:
            shape = x.shape[:2] + (1,) * (x.dim() - 2)
        else:
            shape = x.shape

        keep = torch.empty(shape, dtype=x.dtype, device=x.device)
        keep.bernoulli_(1.0 - self.p, generator=self.generator)
        return x * keep / (1.0 - self.p)

    def extra_repr(self):
        return f"p={self.p}, spatial={self.spatial}"


class Net(nn.Module):
    """
    Convolutional classifier for grayscale 28x28 images (MNIST or FashionMNIST).

    Architecture:
        - Conv2d(1 → 10, kernel_size=5)          # 24x24
        - MaxPool2d(2), ReLU                     # 12x12
        - Conv2d(10 → 20, kernel_size=5)         # 8x8
        - Dropout2d(0.5), MaxPool2d(2), ReLU     # 4x4
        - Flatten                                # 20 * 4 * 4 = 320
        - Linear(320 → 50), ReLU, Dropout(0.5)
        - Linear(50 → 10)
        - LogSoftmax over classes

    Both dropout layers draw from ``generator`` when one is given.
    """

    def __init__(self, generator=None):
        super().__init__()

        self.conv1 = nn.Conv2d(1, 10, kernel_size=5)
        self.conv2 = nn.Conv2d(10, 20, kernel_size=5)
        self.conv2_drop = SeededDropout(0.5, spatial=True, generator=generator)
        self.fc1 = nn.Linear(FLAT_FEATURES, 50)
        self.fc1_drop = SeededDropout(0.5, generator=generator)
        self.fc2 = nn.Linear(50, 10)

    def forward(self, x):
        x = F.relu(F.max_pool2d(self.conv1(x), 2))
        x = F.relu(F.max_pool2d(self.conv2_drop(self.conv2(x)), 2))

        x = x.flatten(1)
        if x.size(1) != FLAT_FEATURES:
            raise ShapeMismatchError(
                f"Expected {FLAT_FEATURES} features after the conv stack, "
                f"got {x.size(1)}; input images must be 1x28x28"
            )

        x = self.fc1_drop(F.relu(self.fc1(x)))
        x = self.fc2(x)
        return F.log_softmax(x, dim=1)
