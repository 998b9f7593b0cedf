# splattrain

Building blocks for training Gaussian splat scenes, written with NumPy.

## Installation

```
pip install splattrain
```

To run the tests:

```
pip install "splattrain[test]"
pytest
```

## Modules

- `splattrain.colmap` reads COLMAP sparse reconstructions in text or binary form.
  `read_cameras`, `read_images` and `read_points3d` each take a file object and a
  `binary` flag. Binary readers need a stream opened in binary mode. Text readers
  accept either a binary or a text stream. Each returns a dictionary keyed by id,
  holding `Camera`, `Image` or `Point3D` dataclasses. Malformed or truncated input
  raises `ColmapFormatError`, which is a `ValueError`.
  - `CameraModel` lists the eleven COLMAP camera models. `CameraModel.from_id` and
    `CameraModel.from_name` return `None` for unknown models. `num_params()` gives
    the parameter count of a model.
  - `Camera.focal()` returns `(fx, fy)`. `Camera.principal_point()` returns
    `(cx, cy)`, rounded to single precision.
  - `Image.quat` is stored in `(x, y, z, w)` order. In binary files, point ids are
    read as big-endian 64-bit integers.
- `splattrain.adam` implements Adam with optional weight decay, optional gradient
  clipping (by value or by norm, not both) and an optional per-element
  learning-rate `scaling` carried in `AdamState`. Build the optimiser with
  `AdamScaledConfig(...).init()`. The defaults are `beta_1=0.9`, `beta_2=0.999`
  and `epsilon=1e-5`. `AdamScaled.step(lr, tensor, grad, state)` returns the
  updated tensor together with the new state.
- `splattrain.multinomial.multinomial_sample(weights, n, rng=None)` draws `n`
  distinct indices without replacement, each chosen with probability proportional
  to its weight. It raises `ValueError` for negative, infinite or NaN weights, and
  when `n` is larger than the number of weights.
- `splattrain.codewriter.CodeWriter` collects lines of source text and indents
  each by four spaces per open `{`. `add_line` raises `ValueError` on an
  unbalanced `}`. `string()` returns the text written so far.
- `splattrain.stats.RefineRecord` keeps a running maximum of each splat's
  screen-space gradient norm. `gather_stats(refine_weight, (width, height),
  global_from_compact_gid, num_visible)` folds one render's `[x, y]` gradients
  into the record in place. `keep(indices)` returns a new record that holds only
  the selected splats.
- `splattrain.train_config` contains:
  - `TrainConfig`, the training and refinement defaults;
  - `mean_schedule()` and `scale_schedule()`, which return an
    `ExponentialLrScheduler` decaying from the start rate to the end rate over
    `total_steps`;
  - `RefineStats`, `inv_sigmoid` and `MIN_OPACITY`.

## Examples

```python
from splattrain.colmap import read_cameras

with open("sparse/0/cameras.bin", "rb") as fh:
    cameras = read_cameras(fh, binary=True)

for cam in cameras.values():
    print(cam.id, cam.model, cam.focal(), cam.principal_point())
```

```python
import numpy as np
from splattrain.adam import AdamScaledConfig

optim = AdamScaledConfig(epsilon=1e-15).init()
params = np.zeros(3)
state = None
for _ in range(10):
    grad = 2 * (params - 1.0)
    params, state = optim.step(1e-2, params, grad, state)
```

```python
from splattrain.train_config import TrainConfig

schedule = TrainConfig().mean_schedule()
print(schedule.step())  # 4e-05 on the first step
```

## What this package does not do

It contains no splat renderer, no image-similarity loss, no training loop and no
command-line program. It also does not prune or densify splats. It supplies the
pieces around those parts: dataset reading, the optimiser, sampling, refinement
statistics and configuration.