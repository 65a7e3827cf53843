import dataclasses

import numpy as np
import pytest

from kernelfilters.convolution import apply_kernel, convolve_rows, row_blocks
from kernelfilters.errors import InvalidKernel, InvalidParameter
from kernelfilters.kernels import (
    BLUR_3X3,
    BOX_BLUR,
    EDGE,
    EMBOSS,
    GRADIENT_X,
    GRADIENT_Y,
    Kernel,
    get_kernel,
)


def test_gradient_x_forward_difference(make_grey):
    img = make_grey([[10, 20], [30, 40]])
    out = apply_kernel(img, GRADIENT_X)
    # (0, 0): -10 + 20; (1, 0): the x + 1 sample clamps back onto itself
    np.testing.assert_array_equal(out[:, :, 0], [[10, 0], [10, 0]])
    np.testing.assert_array_equal(out[:, :, 1], out[:, :, 0])
    np.testing.assert_array_equal(out[:, :, 2], out[:, :, 0])


def test_gradient_y_subtracts_row_below(make_grey):
    img = make_grey([[30, 40], [10, 20]])
    out = apply_kernel(img, GRADIENT_Y)
    np.testing.assert_array_equal(out[:, :, 0], [[20, 20], [0, 0]])


def test_negative_sums_clamp_to_zero(make_grey):
    out = apply_kernel(make_grey([[10, 20], [30, 40]]), GRADIENT_Y)
    assert (out[:, :, :3] == 0).all()


def test_single_pixel_scales_by_weight_sum(make_grey):
    np.testing.assert_array_equal(apply_kernel(make_grey([[160]]), BLUR_3X3)[0, 0, :3], [160] * 3)
    np.testing.assert_array_equal(apply_kernel(make_grey([[50]]), [[2, 1]])[0, 0, :3], [150] * 3)
    np.testing.assert_array_equal(apply_kernel(make_grey([[100]]), [[2, 1]])[0, 0, :3], [255] * 3)


def test_output_alpha_is_always_opaque(make_grey):
    img = make_grey([[1, 2], [3, 4]], alpha=0)
    out = apply_kernel(img, GRADIENT_X)
    assert (out[:, :, 3] == 255).all()


def test_preserve_alpha_flag_copies_input_alpha(make_grey):
    img = make_grey([[1, 2], [3, 4]], alpha=0)
    out = apply_kernel(img, GRADIENT_X, preserve_alpha=True)
    assert (out[:, :, 3] == 0).all()


def test_each_term_is_truncated_before_summing(make_grey):
    # 0.5 + 0.5 would round to 1 if summed as floats
    out = apply_kernel(make_grey([[1, 1, 1]]), [[0.5, 0.5]])
    assert (out[:, :, :3] == 0).all()


def test_truncation_is_toward_zero(make_grey):
    # trunc(-1.5) = -1, so 9 rather than 8
    out = apply_kernel(make_grey([[3, 10]]), [[-0.5, 1]])
    assert out[0, 0, 0] == 9


def test_offsets_are_not_centred(make_grey):
    out = apply_kernel(make_grey([[1, 2, 3, 4, 5]]), [[0, 0, 1]])
    np.testing.assert_array_equal(out[0, :, 0], [3, 4, 5, 5, 5])


def test_columns_map_to_x_and_rows_to_y(make_grey):
    img = make_grey([[1, 2], [3, 4]])
    np.testing.assert_array_equal(apply_kernel(img, [[0, 1]])[:, :, 0], [[2, 2], [4, 4]])
    np.testing.assert_array_equal(apply_kernel(img, [[0], [1]])[:, :, 0], [[3, 4], [3, 4]])


def test_input_is_not_mutated(random_image):
    before = random_image.copy()
    out = apply_kernel(random_image, EMBOSS)
    np.testing.assert_array_equal(random_image, before)
    assert out is not random_image
    assert out.shape == random_image.shape
    assert out.dtype == np.uint8


@pytest.mark.parametrize("block_size", [1, 3, 5, None])
def test_parallel_blocks_match_sequential(random_image, block_size):
    kernel = BOX_BLUR.normalized()
    expected = apply_kernel(random_image, kernel)
    out = apply_kernel(random_image, kernel, n_jobs=2, block_size=block_size, prefer="threads")
    np.testing.assert_array_equal(out, expected)


def test_row_ranges_are_independent(random_image):
    full = convolve_rows(random_image, EDGE, 0, random_image.shape[0])
    parts = [convolve_rows(random_image, EDGE, s, e) for s, e in row_blocks(random_image.shape[0], 4)]
    np.testing.assert_array_equal(np.concatenate(parts), full)


def test_row_blocks_cover_height():
    assert row_blocks(10, 4) == [(0, 4), (4, 8), (8, 10)]
    assert row_blocks(1, 64) == [(0, 1)]


def test_bad_block_size(random_image):
    with pytest.raises(InvalidParameter):
        apply_kernel(random_image, EDGE, n_jobs=2, block_size=0)


@pytest.mark.parametrize("weights", [[], [[]], [[[1]]], [[1, float("nan")]], [[1, 2], [3]], "abc"])
def test_invalid_kernels(weights):
    with pytest.raises(InvalidKernel):
        Kernel(weights)


def test_kernel_indexing_and_shape():
    assert GRADIENT_X.width == 2 and GRADIENT_X.height == 1
    assert GRADIENT_X.weight(0, 0) == -1
    assert GRADIENT_X.weight(1, 0) == 1
    assert GRADIENT_Y.width == 1 and GRADIENT_Y.height == 2
    assert GRADIENT_Y.weight(0, 1) == -1


def test_kernel_is_immutable():
    assert not BLUR_3X3.weights.flags.writeable
    with pytest.raises(ValueError):
        BLUR_3X3.weights[0, 0] = 5
    with pytest.raises(dataclasses.FrozenInstanceError):
        BLUR_3X3.name = "other"


def test_kernel_copies_its_input():
    source = np.ones((2, 2))
    kernel = Kernel(source)
    source[0, 0] = 9
    assert kernel.weight(0, 0) == 1


def test_normalized():
    assert BOX_BLUR.normalized().sum() == pytest.approx(1.0)
    assert BLUR_3X3.sum() == pytest.approx(1.0)
    # zero-sum kernels are returned unchanged
    assert EDGE.normalized() is EDGE


def test_get_kernel():
    assert get_kernel("blur_5x5").shape == (5, 5)
    with pytest.raises(KeyError, match="available"):
        get_kernel("nope")


def test_weights_stored_as_float32():
    assert BLUR_3X3.weights.dtype == np.float32
    assert Kernel([[1, 2]]).weights.dtype == np.float32


@pytest.mark.parametrize("weights", [[[1e39, 1]], [[-1e39]]])
def test_weights_outside_float32_range_are_rejected(weights):
    with pytest.raises(InvalidKernel, match="finite"):
        Kernel(weights)


def test_large_finite_weights_still_saturate(make_grey):
    out = apply_kernel(make_grey([[0, 10]]), [[3e38, 1]])
    # (0, 0): 0 * 3e38 + 10; (1, 0): 10 * 3e38 saturates
    assert out[0, 0, 0] == 10
    assert out[0, 1, 0] == 255


def test_kernel_errors_name_the_operation(make_grey):
    with pytest.raises(InvalidKernel, match="^apply_kernel: Kernel: "):
        apply_kernel(make_grey([[1]]), [[]])
    with pytest.raises(InvalidKernel, match="'ridge'"):
        Kernel([1, 2, 3], name="ridge")
