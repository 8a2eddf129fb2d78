import math

from tqdm import tqdm
import torch.nn.functional as F

from mnist_cnn.errors import ConfigurationError, DivergenceError


class Trainer:
    def __init__(self, model, optimizer, train_loader, device, log_interval=10, progress=True):
        self.model = model
        self.optimizer = optimizer
        self.train_loader = train_loader
        self.device = device
        self.log_interval = log_interval
        self.progress = progress

        # optimizer steps applied so far, over all epochs
        self.steps = 0

    @property
    def dataset_size(self):
        return len(self.train_loader.dataset)

    def train_epoch(self, epoch):
        """One pass over the training loader, one optimizer step per batch.

        Returns the loss of the last batch.
        """
        if self.dataset_size == 0:
            raise ConfigurationError("Cannot train on an empty dataset")

        self.model.train()
        loss_value = float("nan")

        loop = tqdm(self.train_loader, desc=f"Epoch [{epoch}]", disable=not self.progress)

        for batch_idx, (data, target) in enumerate(loop):
            data = data.to(self.device)
            target = target.to(self.device)

            self.optimizer.zero_grad()

            output = self.model(data)
            loss = F.nll_loss(output, target)

            loss_value = loss.item()
            if not math.isfinite(loss_value):
                raise DivergenceError(epoch, batch_idx, loss_value)

            loss.backward()
            self.optimizer.step()
            self.steps += 1

            loop.set_postfix(loss=loss_value)

            if batch_idx % self.log_interval == 0:
                tqdm.write(
                    f"Train Epoch {epoch} "
                    f"[{batch_idx * len(data)}/{self.dataset_size}] "
                    f"Loss: {loss_value:.4f}"
                )

        return loss_value
