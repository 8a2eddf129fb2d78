import shutil
import os
import gzip
import urllib.request
import argparse

from mnist_cnn.errors import ConfigurationError

# dataset name -> (torchvision folder under the data root, base url)
SOURCES = {
    "mnist": ("MNIST", "https://storage.googleapis.com/cvdf-datasets/mnist/"),
    "fashion": ("FashionMNIST", "http://fashion-mnist.s3-website.eu-central-1.amazonaws.com/"),
}

FILES = [
    "train-images-idx3-ubyte",
    "train-labels-idx1-ubyte",
    "t10k-images-idx3-ubyte",
    "t10k-labels-idx1-ubyte",
]


def download(root, dataset="mnist"):
    """Fetch the four raw IDX files of ``dataset`` into ``<root>/<Folder>/raw``.

    Files already present are left alone. A file is only moved into place
    once it is fully extracted, so a failed download is fetched again on
    the next call. Returns the raw directory.
    """
    if dataset not in SOURCES:
        raise ConfigurationError(f"Unknown dataset {dataset}")

    folder, base_url = SOURCES[dataset]
    raw_dir = os.path.join(root, folder, "raw")
    os.makedirs(raw_dir, exist_ok=True)

    for filename in FILES:
        file_path = os.path.join(raw_dir, filename)
        if os.path.exists(file_path):
            print(f"{file_path} already present, skipping.")
            continue

        url = base_url + filename + ".gz"
        gz_path = file_path + ".gz"
        part_path = file_path + ".part"

        try:
            print(f"Downloading {url} to {gz_path} ...")
            urllib.request.urlretrieve(url, gz_path)

            print(f"Extracting {gz_path} to {file_path} ...")
            with gzip.open(gz_path, 'rb') as f_in:
                with open(part_path, 'wb') as f_out:
                    shutil.copyfileobj(f_in, f_out)
            os.replace(part_path, file_path)
        finally:
            for leftover in (gz_path, part_path):
                if os.path.exists(leftover):
                    os.remove(leftover)

        print(f"{file_path} is ready.\n")

    return raw_dir


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--data", choices=sorted(SOURCES), default="mnist",
                        help="Select the dataset to download")
    parser.add_argument("--root", default="build/mnist",
                        help="Data root the files are written under")
    args = parser.parse_args(argv)
    download(args.root, args.data)


if __name__ == "__main__":
    main()
