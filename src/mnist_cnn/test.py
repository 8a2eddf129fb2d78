from collections import namedtuple

from tqdm import tqdm
import torch
import torch.nn.functional as F

from mnist_cnn.errors import ConfigurationError

EvalResult = namedtuple("EvalResult", ["loss", "accuracy", "correct", "total"])


class Tester:
    # not a pytest test class
    __test__ = False

    def __init__(self, test_loader, device, progress=True):
        """Initialize test loader and device

        Args:
            test_loader (pytorch.dataloader): TestLoader used during testing
            device (pytorch.device): cpu or cuda
            progress (bool): show a tqdm bar while testing
        """
        self.test_loader = test_loader
        self.device = device
        self.progress = progress

    @torch.no_grad()
    def test(self, model):
        """Test method

        Runs with gradient recording off. The decorator restores it on
        return and on exceptions.

        Args:
            model (pytorch model): model to be tested, already on the device

        Returns:
            EvalResult: mean per-sample NLL loss, accuracy in [0, 1],
            number of correct predictions and number of samples
        """
        dataset_size = len(self.test_loader.dataset)
        if dataset_size == 0:
            raise ConfigurationError("Cannot evaluate on an empty dataset")

        model.eval()

        total_loss = 0.0
        correct = 0

        loop = tqdm(self.test_loader, desc="Testing", disable=not self.progress)

        for data, target in loop:
            data = data.to(self.device)
            target = target.to(self.device)

            output = model(data)

            total_loss += F.nll_loss(output, target, reduction="sum").item()
            pred = output.argmax(dim=1)
            correct += pred.eq(target).sum().item()

        avg_loss = total_loss / dataset_size
        accuracy = correct / dataset_size

        print(f"Test set: Average loss: {avg_loss:.4f} | Accuracy: {accuracy:.3f}")

        return EvalResult(avg_loss, accuracy, correct, dataset_size)
