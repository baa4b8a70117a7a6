"""
Unit tests for mine candidate generation and image scoring.
"""
import numpy as np
import pytest
from PIL import Image

from detection import (
    CandidateGenerator,
    ImageSource,
    LuminanceScorer,
    MineCandidate,
    PineconeScorer,
    expand_pool,
    load_image,
    region_bounds,
)


def weights_by_position(candidates) -> dict:
    return {candidate.position: candidate.weight for candidate in candidates}


# ============================================================================
# Uniform Pool Tests
# ============================================================================

class TestUniformCandidates:
    """Test the no-image path."""

    @pytest.mark.parametrize("size", [8, 12, 16])
    def test_covers_every_position_once(self, size: int) -> None:
        """Every cell appears exactly once with weight 1."""
        candidates = CandidateGenerator().generate(size, 20)
        assert len(candidates) == size * size
        assert {c.position for c in candidates} == {
            (col, row) for row in range(size) for col in range(size)
        }
        assert all(c.weight == 1 for c in candidates)

    def test_uninitialized_generator_ignores_image(
        self, dark_corner_image: ImageSource
    ) -> None:
        """Before initialize() the generator stays uniform."""
        generator = CandidateGenerator(scorer=LuminanceScorer())
        assert generator.ready is False
        candidates = generator.generate(8, 20, dark_corner_image)
        assert all(c.weight == 1 for c in candidates)

    def test_initialize_is_idempotent(self) -> None:
        """initialize() may be called repeatedly."""
        generator = CandidateGenerator()
        generator.initialize()
        generator.initialize()
        assert generator.ready is True


class TestExpandPool:
    """Test weight expansion into repeated entries."""

    def test_repeats_by_weight(self) -> None:
        """Each position appears weight times."""
        pool = expand_pool([MineCandidate(0, 0, 3), MineCandidate(1, 2, 1)])
        assert sorted(pool) == [(0, 0), (0, 0), (0, 0), (1, 2)]


# ============================================================================
# Image Pool Tests
# ============================================================================

class TestLuminanceCandidates:
    """Test the darkness heuristic."""

    def test_dark_region_gets_most_entries(
        self,
        luminance_generator: CandidateGenerator,
        dark_corner_image: ImageSource,
    ) -> None:
        """The black block gets 25 entries, white cells the minimum."""
        weights = weights_by_position(
            luminance_generator.generate(8, 20, dark_corner_image)
        )
        assert weights[(0, 0)] == 25
        assert all(weight == 1 for position, weight in weights.items() if position != (0, 0))

    def test_flat_image_is_uniform(
        self, luminance_generator: CandidateGenerator, white_image: ImageSource
    ) -> None:
        """With no contrast every cell gets the same weight."""
        weights = weights_by_position(luminance_generator.generate(8, 20, white_image))
        assert len(set(weights.values())) == 1

    def test_deterministic(
        self,
        luminance_generator: CandidateGenerator,
        dark_corner_image: ImageSource,
    ) -> None:
        """Same pixels, same candidates."""
        first = luminance_generator.generate(8, 20, dark_corner_image)
        second = luminance_generator.generate(8, 20, dark_corner_image)
        assert first == second


class TestPineconeCandidates:
    """Test the pinecone color heuristic."""

    def test_brown_patch_gets_most_entries(
        self, brown_patch_image: ImageSource
    ) -> None:
        """The brown block outweighs every plain cell."""
        generator = CandidateGenerator(scorer=PineconeScorer(), seed=3)
        generator.initialize()
        weights = weights_by_position(generator.generate(8, 20, brown_patch_image))

        assert weights[(5, 2)] == 25
        assert all(weight == 1 for position, weight in weights.items() if position != (5, 2))

    def test_every_region_reachable(self, white_image: ImageSource) -> None:
        """Regions without features still get a fallback entry."""
        generator = CandidateGenerator(scorer=PineconeScorer(), seed=3)
        generator.initialize()
        candidates = generator.generate(12, 20, white_image)

        assert len(candidates) == 144
        assert all(c.weight >= 1 for c in candidates)

    def test_weights_do_not_depend_on_seed(
        self, brown_patch_image: ImageSource
    ) -> None:
        """Fallback picks only move the sample point, never the weight."""
        results = []
        for seed in (1, 2):
            generator = CandidateGenerator(scorer=PineconeScorer(), seed=seed)
            generator.initialize()
            results.append(weights_by_position(generator.generate(8, 20, brown_patch_image)))
        assert results[0] == results[1]

    def test_sample_point_inside_region(
        self, brown_patch_image: ImageSource
    ) -> None:
        """Reported pixel positions fall inside their cell's region."""
        generator = CandidateGenerator(scorer=PineconeScorer(), seed=3)
        generator.initialize()
        for candidate in generator.generate(8, 20, brown_patch_image):
            bounds = region_bounds(
                8, brown_patch_image, candidate.column_index, candidate.row_index
            )
            assert bounds.start_x <= candidate.x < bounds.end_x
            assert bounds.start_y <= candidate.y < bounds.end_y

    def test_image_smaller_than_board(self) -> None:
        """Tiny images still produce one candidate per cell."""
        image = ImageSource(np.full((4, 4, 4), 255, dtype=np.uint8))
        generator = CandidateGenerator(scorer=PineconeScorer(), seed=3)
        generator.initialize()
        assert len(generator.generate(8, 20, image)) == 64

    def test_brown_patch_on_region_edge(self) -> None:
        """Similar pixels in the next region do not count towards the area."""
        pixels = np.full((64, 64, 4), 255, dtype=np.uint8)
        pixels[16:24, 46:50, :3] = (140, 90, 40)
        image = ImageSource(pixels)
        bounds = region_bounds(8, image, 5, 2)

        region = image.region_rgb(
            bounds.start_x, bounds.start_y, bounds.end_x, bounds.end_y
        )
        scorer = PineconeScorer()
        assert scorer._area_size(region, 7, 4) == 16

        result = scorer.score(image, bounds, 1, np.random.default_rng(0))
        assert bounds.start_x <= result.x < bounds.end_x


class CountingScorer(LuminanceScorer):
    """Luminance scorer that records how often it runs."""

    def __init__(self) -> None:
        self.calls = 0

    def score(self, image, bounds, step, rng):
        self.calls += 1
        return super().score(image, bounds, step, rng)


class TestScoreCache:
    """Test reuse of scored pools across resets."""

    def test_same_image_scored_once(self, dark_corner_image: ImageSource) -> None:
        """Repeated requests for one image and size reuse the scores."""
        scorer = CountingScorer()
        generator = CandidateGenerator(scorer=scorer, seed=1)
        generator.initialize()

        first = generator.generate(8, 20, dark_corner_image)
        second = generator.generate(8, 20, dark_corner_image)
        assert scorer.calls == 64
        assert first == second
        assert first is not second

    def test_new_image_or_size_rescored(
        self, dark_corner_image: ImageSource, white_image: ImageSource
    ) -> None:
        """A different image or board size is scored afresh."""
        scorer = CountingScorer()
        generator = CandidateGenerator(scorer=scorer, seed=1)
        generator.initialize()

        generator.generate(8, 20, dark_corner_image)
        generator.generate(12, 20, dark_corner_image)
        generator.generate(12, 20, white_image)
        assert scorer.calls == 64 + 144 + 144


# ============================================================================
# Image Source Tests
# ============================================================================

class TestImageSource:
    """Test the decoded pixel buffer."""

    def test_buffer_is_read_only(self, white_image: ImageSource) -> None:
        """The generator can never write to the buffer."""
        with pytest.raises(ValueError):
            white_image.pixels[0, 0, 0] = 0

    def test_caller_array_stays_writable(self) -> None:
        """Wrapping an array does not freeze the caller's copy."""
        pixels = np.zeros((2, 2, 4), dtype=np.uint8)
        ImageSource(pixels)
        pixels[0, 0, 0] = 1
        assert pixels[0, 0, 0] == 1

    def test_rejects_non_rgba(self) -> None:
        """Only (height, width, 4) arrays are accepted."""
        with pytest.raises(ValueError, match="RGBA"):
            ImageSource(np.zeros((4, 4, 3), dtype=np.uint8))

    def test_from_rgba_bytes(self) -> None:
        """Flat RGBA bytes are reshaped row-major."""
        data = bytes(range(2 * 3 * 4))
        image = ImageSource.from_rgba_bytes(2, 3, data)
        assert (image.width, image.height) == (2, 3)
        assert image.pixels[1, 0, 0] == 8

    def test_from_rgba_bytes_length_mismatch(self) -> None:
        """Byte count must match the dimensions."""
        with pytest.raises(ValueError, match="Expected"):
            ImageSource.from_rgba_bytes(2, 2, b"\x00" * 15)

    def test_load_image_from_file(self, tmp_path) -> None:
        """Pillow decodes and downsizes photos."""
        path = tmp_path / "photo.png"
        Image.new("RGB", (64, 48), (140, 90, 40)).save(path)

        image = load_image(path, max_side=32)
        assert (image.width, image.height) == (32, 24)
        assert tuple(image.pixels[0, 0]) == (140, 90, 40, 255)

    def test_load_image_from_bytes(self, tmp_path) -> None:
        """Encoded bytes are accepted as well as paths."""
        path = tmp_path / "photo.png"
        Image.new("RGBA", (10, 10), (0, 0, 0, 255)).save(path)

        image = load_image(path.read_bytes(), max_side=None)
        assert (image.width, image.height) == (10, 10)

    def test_region_rgb_copies_only_the_slice(self) -> None:
        """Region channels come back as int32 with the region's shape."""
        pixels = np.zeros((40, 30, 4), dtype=np.uint8)
        pixels[10, 5] = (1, 2, 3, 255)
        image = ImageSource(pixels)

        region = image.region_rgb(5, 10, 15, 30)
        assert region.shape == (20, 10, 3)
        assert region.dtype == np.int32
        assert tuple(region[0, 0]) == (1, 2, 3)
