"""
Train and test the MNIST classifier for a fixed number of epochs.

Key functionalities:
- Derives every source of randomness from one seed: weight initialisation
  runs in a forked RNG scope, dropout and data loading get their own
  seeded torch.Generator. Global RNG state is left as it was.
- Sets up DataLoaders for training and testing with:
    - batch_size = 64 for training, 1000 for testing
    - sequential sampling for both splits
    - pin_memory=True when training on GPU
- Supports execution on both CPU and GPU.
- Runs, for every epoch, one training pass followed by one test pass and
  prints average loss and accuracy.
- Measures and prints total run time, using torch.cuda.synchronize() for
  accurate GPU timing.

Usage:
    mnist-cnn --device cuda
    mnist-cnn --device cpu --dataset fashion --download
"""

import time
import argparse

import torch
from torch.optim import SGD

from mnist_cnn.config import RunConfig
from mnist_cnn.dataloader import get_dataset, get_dataloader
from mnist_cnn.dataset import download as download_dataset
from mnist_cnn.errors import ConfigurationError
from mnist_cnn.model import Net
from mnist_cnn.test import Tester
from mnist_cnn.train import Trainer


def select_device(requested="auto"):
    if requested == "auto":
        requested = "cuda" if torch.cuda.is_available() else "cpu"

    if requested == "cuda":
        if not torch.cuda.is_available():
            raise ConfigurationError("CUDA requested but not available")
        print("CUDA available! Training on GPU.")
    else:
        print("Training on CPU.")

    return torch.device(requested)


def make_generator(seed, device="cpu"):
    return torch.Generator(device=device).manual_seed(seed)


def build_model(config, device):
    """Initialise the weights from ``config.seed`` and move the model to ``device``."""
    device = torch.device(device)
    with torch.random.fork_rng(devices=[]):
        torch.default_generator.manual_seed(config.seed)
        model = Net(generator=make_generator(config.seed, device))
    return model.to(device)


def _synchronize(device):
    if device.type == "cuda":
        torch.cuda.synchronize()


def run(config=RunConfig(), device="auto", download=False, progress=True):
    """Set up a run and train for ``config.epochs`` epochs.

    Returns the EvalResult of every epoch, in order.
    """
    device = select_device(device)
    if device.type == "cuda":
        torch.backends.cudnn.deterministic = True
        torch.backends.cudnn.benchmark = False

    if download:
        download_dataset(config.data_root, config.dataset)

    model = build_model(config, device)

    # Dataloader
    data_generator = make_generator(config.seed)
    pin_memory = device.type == "cuda"

    train_set = get_dataset(config.dataset, config.data_root, train=True,
                            mean=config.mean, std=config.std)
    test_set = get_dataset(config.dataset, config.data_root, train=False,
                           mean=config.mean, std=config.std)

    train_loader = get_dataloader(train_set, train=True, batch_size=config.train_batch_size,
                                  num_workers=config.num_workers, pin_memory=pin_memory,
                                  generator=data_generator)
    test_loader = get_dataloader(test_set, train=False, batch_size=config.test_batch_size,
                                 num_workers=config.num_workers, pin_memory=pin_memory,
                                 generator=data_generator)

    optimizer = SGD(model.parameters(), lr=config.lr, momentum=config.momentum)

    # Initialize trainer and tester
    trainer = Trainer(model, optimizer, train_loader, device,
                      log_interval=config.log_interval, progress=progress)
    tester = Tester(test_loader, device, progress=progress)

    _synchronize(device)
    start_time = time.perf_counter()

    results = []
    for epoch in range(1, config.epochs + 1):
        trainer.train_epoch(epoch)
        results.append(tester.test(model))

    _synchronize(device)
    end_time = time.perf_counter()

    print(f"Time for {config.epochs} epochs is: {end_time - start_time:.3f} s")

    return results


def main(argv=None):
    parser = argparse.ArgumentParser()
    parser.add_argument("--device", choices=["auto", "cuda", "cpu"], default="auto")
    parser.add_argument("--dataset", choices=["mnist", "fashion"], default="mnist")
    parser.add_argument("--data-root", default=RunConfig.data_root)
    parser.add_argument("--download", action="store_true",
                        help="Fetch the raw dataset files before training")

    args = parser.parse_args(argv)
    config = RunConfig(data_root=args.data_root, dataset=args.dataset)
    run(config, device=args.device, download=args.download)


if __name__ == "__main__":
    main()
