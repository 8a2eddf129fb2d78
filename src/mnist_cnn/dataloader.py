import os

from torch.utils.data import DataLoader
from torchvision import datasets, transforms

from mnist_cnn.errors import ConfigurationError

DATASETS = {
    "mnist": datasets.MNIST,
    "fashion": datasets.FashionMNIST
}


def get_transform(mean=0.1307, std=0.3081):
    """ToTensor followed by single-channel normalisation."""
    return transforms.Compose([
        transforms.ToTensor(),
        transforms.Normalize((mean,), (std,)),
    ])


def get_dataset(dataset_name, root, train=True, mean=0.1307, std=0.3081, download=False):
    """
    Load one split of a supported torchvision dataset, normalised.

    Args:
        dataset_name (str): Key of the DATASETS dictionary ("mnist", "fashion").
        root (str): Directory holding ``<Folder>/raw/*-ubyte``.
        train (bool, optional): Training split if True, test split otherwise.
        mean (float, optional): Normalisation mean. Defaults to 0.1307.
        std (float, optional): Normalisation std. Defaults to 0.3081.
        download (bool, optional): Let torchvision fetch missing files.
            Defaults to False.

    Raises:
        ConfigurationError: unknown dataset name, or files missing under root.

    Returns:
        torchvision.datasets.VisionDataset: the requested split.
    """
    dataset_cls = DATASETS.get(dataset_name.lower())

    if dataset_cls is None:
        raise ConfigurationError(f"Unknown dataset {dataset_name}")

    if not download and not os.path.isdir(root):
        raise ConfigurationError(f"Dataset root {root} does not exist")

    try:
        return dataset_cls(root=root, train=train, download=download,
                           transform=get_transform(mean, std))
    except RuntimeError as e:
        raise ConfigurationError(f"Cannot read {dataset_name} from {root}: {e}") from e


def get_dataloader(dataset, train=True, batch_size=64, num_workers=0, pin_memory=False, generator=None):
    """
    Wrap a dataset into a DataLoader with default (stacking) collation.

    Batches are produced in dataset order for both splits, so a run is
    reproducible from its seed alone.

    Args:
        dataset (torch.utils.data.Dataset): Samples of (image, label).
        train (bool, optional): Whether ``dataset`` is the training split.
            Only used in error messages. Defaults to True.
        batch_size (int, optional): Number of samples per batch.
            Defaults to 64.
        num_workers (int, optional): Number of subprocesses used for
            data loading. 0 loads batches in the main process. Defaults to 0.
        pin_memory (bool, optional): If True, the DataLoader will copy
            tensors into CUDA pinned memory before returning them.
            Useful only when training on CUDA. Defaults to False.
        generator (torch.Generator, optional): CPU generator seeding the
            sampler and the workers.

    Returns:
        torch.utils.data.DataLoader: A DataLoader over ``dataset``.
    """
    if len(dataset) == 0:
        split = "training" if train else "test"
        raise ConfigurationError(f"The {split} dataset is empty")

    loader = DataLoader(
        dataset,
        batch_size=batch_size,
        shuffle=False,
        num_workers=int(num_workers),
        pin_memory=pin_memory,
        generator=generator,
    )

    return loader
