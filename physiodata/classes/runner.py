from dataclasses import dataclass
from pathlib import Path
from typing import List

import matplotlib.pyplot as plt

from physiodata.classes.container import PhysioContainer
from physiodata.classes.loaders import Workspace
from physiodata.classes.signal_group import SignalGroup
from physiodata.classes.step import Step


@dataclass
class Runner:
    out_dir: Path
    make_plots: bool = False

    def _plot_signals(self, signals: SignalGroup, title: str, path: Path, container: PhysioContainer = None) -> Path:
        t = signals.time_axis()
        n = len(signals.channels)
        fig, axes = plt.subplots(n, 1, figsize=(12, 2.5 * n + 1), sharex=True, squeeze=False)
        for ax, x, name, unit in zip(axes[:, 0], signals.channels, signals.channel_names, signals.channel_units):
            ax.plot(t, x, linewidth=0.6)
            ax.set_ylabel(f"{name} ({unit})" if unit else name)

            if container is not None:
                for _, epoch in container.epochs.data.iterrows():
                    ax.axvspan(epoch["startTime"], epoch["endTime"], alpha=0.2)
                for t_label in container.labels.t:
                    ax.axvline(t_label, color="k", linestyle="--", linewidth=0.8)

        if container is not None:
            top = axes[0, 0]
            for t_label, value in container.labels.events():
                top.annotate(value, xy=(t_label, 1), xycoords=("data", "axes fraction"),
                             rotation=90, va="top", ha="right", fontsize=7)

        axes[0, 0].set_title(title)
        axes[-1, 0].set_xlabel("t (s)")
        fig.tight_layout()
        path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(path, dpi=160)
        plt.close(fig)
        return path

    def run(self, ws: Workspace, steps: List[Step]) -> Workspace:
        for i, step in enumerate(steps):
            i_step_name = f"{i}_{step.name}"

            # Sanity: ensure inputs exist
            missing = [k for k in step.inputs if k not in ws]
            if missing:
                raise KeyError(f"Step '{step.name}' missing inputs: {missing}")

            step.run(ws)

            # Artifacts (plots)
            if self.make_plots:
                plot_keys = step.plot_keys or step.outputs
                plot_dir = self.out_dir / "plots" / i_step_name
                for k in plot_keys:
                    v = ws.get(k)
                    path = plot_dir / f"{k.replace('/', '_')}.png"
                    if isinstance(v, SignalGroup):
                        self._plot_signals(v, title=f"{k} ({step.name})", path=path)
                    elif isinstance(v, PhysioContainer):
                        self._plot_signals(v.signals, title=f"{k} ({step.name})", path=path, container=v)

        return ws
