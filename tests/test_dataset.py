# test_dataset.py
import os
import urllib.request

import pytest

from mnist_cnn import dataset
from mnist_cnn.dataloader import get_dataset
from mnist_cnn.errors import ConfigurationError

from conftest import fake_urlretrieve, idx_bytes


@pytest.fixture
def fetched(monkeypatch):
    urls = []

    def record(url, filename):
        urls.append(url)
        return fake_urlretrieve(url, filename)

    monkeypatch.setattr(urllib.request, "urlretrieve", record)
    return urls


def test_download_unpacks_raw_files(tmp_path, fetched):
    raw_dir = dataset.download(str(tmp_path), "mnist")

    assert raw_dir == os.path.join(str(tmp_path), "MNIST", "raw")
    assert sorted(os.listdir(raw_dir)) == sorted(dataset.FILES), "Archives should be removed after extraction."
    for name in dataset.FILES:
        with open(os.path.join(raw_dir, name), "rb") as f:
            assert f.read() == idx_bytes(name)
    assert fetched == [dataset.SOURCES["mnist"][1] + name + ".gz" for name in dataset.FILES]


def test_downloaded_files_load(tmp_path, fetched):
    dataset.download(str(tmp_path), "fashion")
    assert len(get_dataset("fashion", str(tmp_path), train=True)) == 6
    assert len(get_dataset("fashion", str(tmp_path), train=False)) == 3


def test_existing_files_are_skipped(tmp_path, fetched):
    dataset.download(str(tmp_path), "mnist")
    fetched.clear()

    dataset.download(str(tmp_path), "mnist")
    assert fetched == []


def test_unknown_dataset(tmp_path):
    with pytest.raises(ConfigurationError):
        dataset.download(str(tmp_path), "kmnist")


def test_cli(tmp_path, fetched):
    dataset.main(["--data", "mnist", "--root", str(tmp_path)])
    assert len(fetched) == 4


def test_failed_extraction_is_fetched_again(tmp_path, monkeypatch):
    urls = []

    def corrupt_first(url, filename):
        urls.append(url)
        if len(urls) == 1:
            with open(filename, "wb") as f:
                f.write(b"not a gzip")
            return filename, None
        return fake_urlretrieve(url, filename)

    monkeypatch.setattr(urllib.request, "urlretrieve", corrupt_first)

    with pytest.raises(OSError):
        dataset.download(str(tmp_path), "mnist")

    raw_dir = os.path.join(str(tmp_path), "MNIST", "raw")
    assert os.listdir(raw_dir) == [], "A failed file must leave nothing behind."

    dataset.download(str(tmp_path), "mnist")

    first = dataset.SOURCES["mnist"][1] + dataset.FILES[0] + ".gz"
    assert urls.count(first) == 2, "The failed file should be downloaded again."
    assert sorted(os.listdir(raw_dir)) == sorted(dataset.FILES)
    with open(os.path.join(raw_dir, dataset.FILES[0]), "rb") as f:
        assert f.read() == idx_bytes(dataset.FILES[0])
