import gzip
import os
import struct

import pytest

from mnist_cnn.dataset import FILES

SPLIT_SIZES = {"train": 6, "t10k": 3}


def idx_bytes(name):
    """Raw IDX content for one of the four MNIST files; image pixels are 0."""
    n = SPLIT_SIZES[name.split("-")[0]]
    if "images" in name:
        return struct.pack(">IIII", 0x0803, n, 28, 28) + bytes(n * 28 * 28)
    return struct.pack(">II", 0x0801, n) + bytes(i % 10 for i in range(n))


def write_raw(raw_dir):
    os.makedirs(raw_dir, exist_ok=True)
    for name in FILES:
        with open(os.path.join(raw_dir, name), "wb") as f:
            f.write(idx_bytes(name))


def fake_urlretrieve(url, filename):
    name = os.path.basename(url)[:-len(".gz")]
    with gzip.open(filename, "wb") as f:
        f.write(idx_bytes(name))
    return filename, None


@pytest.fixture
def mnist_root(tmp_path):
    """A data root holding tiny MNIST and FashionMNIST raw files."""
    write_raw(tmp_path / "MNIST" / "raw")
    write_raw(tmp_path / "FashionMNIST" / "raw")
    return str(tmp_path)
