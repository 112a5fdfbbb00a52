import random
import numpy as np
import pytest
from clones import CloneManager, CloneState
from config import config
from frame_buffer import FrameRingBuffer
from particles import ParticleSystem
from performance import PerformanceSettings
from renderer import CompositingPipeline, alpha_paste

WIDTH, HEIGHT = 400, 300

def live_frame(value=200):
    return np.full((HEIGHT, WIDTH, 3), value, dtype=np.uint8)

@pytest.fixture
def build(source_cls):
    def _build(frame=None, segmenter=None, **clone_kwargs):
        source = source_cls(frame)
        pipeline = CompositingPipeline(
            source,
            WIDTH,
            HEIGHT,
            clone_manager=CloneManager(rng=random.Random(5), **clone_kwargs),
            particles=ParticleSystem(rng=random.Random(5)),
            frame_buffer=FrameRingBuffer(30),
            segmenter=segmenter,
        )
        return source, pipeline
    return _build

def warm_up(pipeline, ticks=15):
    for _ in range(ticks):
        pipeline.tick(16)

def background():
    return np.array(config.BACKGROUND_COLOR, dtype=np.uint8)

def test_not_ready_source_only_clears(build):
    _, pipeline = build(frame=None)
    surface = pipeline.tick(16)
    assert len(pipeline.frame_buffer) == 0
    assert (surface == background()).all()

def test_every_tick_feeds_the_history(build):
    _, pipeline = build(frame=live_frame())
    warm_up(pipeline, 5)
    assert len(pipeline.frame_buffer) == 5

def test_live_feed_is_drawn_on_top_of_clones(build):
    _, pipeline = build(frame=live_frame())
    warm_up(pipeline)
    pipeline.spawn(3)
    pipeline.tick(2000)
    assert pipeline.clone_manager.count == 3
    assert np.array_equal(pipeline.tick(16), live_frame())

def test_spawn_uses_surface_center(build):
    _, pipeline = build(frame=live_frame())
    pipeline.spawn(1)
    clone = pipeline.clone_manager.clones[0]
    assert clone.y == pytest.approx(HEIGHT / 2)
    assert WIDTH / 2 + 130 <= clone.x <= WIDTH / 2 + 170

def active_clone_pipeline(build, segmenter=None):
    _, pipeline = build(frame=live_frame(), segmenter=segmenter)
    warm_up(pipeline)
    pipeline.spawn(1)
    pipeline.tick(1000)
    assert pipeline.clone_manager.clones[0].state == CloneState.ACTIVE
    pipeline.surface[:] = 0
    return pipeline

def test_clone_draws_delayed_frame(build):
    pipeline = active_clone_pipeline(build)
    pipeline.draw_clones()
    clone = pipeline.clone_manager.clones[0]
    value = pipeline.surface[int(clone.y), WIDTH - 50, 0]
    assert value == pytest.approx(200 * config.CLONE_REST_OPACITY, abs=2)
    # Clone is drawn at reduced scale, the left edge stays untouched
    assert pipeline.surface[int(clone.y), 0].sum() == 0

def test_clone_waits_for_history(build):
    _, pipeline = build(frame=live_frame())
    pipeline.tick(16)
    pipeline.spawn(1)
    pipeline.tick(1000)
    pipeline.surface[:] = 0
    pipeline.draw_clones()
    assert pipeline.surface.sum() == 0

def test_mask_hides_clone_background(build, segmenter_cls):
    pipeline = active_clone_pipeline(build, segmenter=segmenter_cls(alpha=0))
    pipeline.set_segmentation(True)
    pipeline.draw_clones()
    assert pipeline.surface.sum() == 0

def test_missing_mask_falls_back_to_unmasked(build, segmenter_cls):
    pipeline = active_clone_pipeline(build, segmenter=segmenter_cls(alpha=None))
    pipeline.set_segmentation(True)
    pipeline.draw_clones()
    assert pipeline.surface.sum() > 0

def test_failing_segmenter_never_breaks_the_tick(build, segmenter_cls):
    pipeline = active_clone_pipeline(build, segmenter=segmenter_cls(fail=True))
    pipeline.set_segmentation(True)
    pipeline.draw_clones()
    assert pipeline.surface.sum() > 0
    assert np.array_equal(pipeline.tick(16), live_frame())

def test_segmenter_receives_live_frames(build, segmenter_cls):
    segmenter = segmenter_cls(alpha=None)
    _, pipeline = build(frame=live_frame(), segmenter=segmenter)
    pipeline.set_segmentation(True)
    warm_up(pipeline, 3)
    assert segmenter.submitted == 3

def test_masked_foreground_shows_only_the_person(build, segmenter_cls):
    alpha = np.zeros((HEIGHT, WIDTH), dtype=np.uint8)
    alpha[:, WIDTH // 2:] = 255
    _, pipeline = build(frame=live_frame(), segmenter=segmenter_cls(alpha=alpha))
    pipeline.set_segmentation(True)
    pipeline.masked_foreground = True
    surface = pipeline.tick(16)
    assert (surface[:, WIDTH // 2:] == 200).all()
    assert (surface[:, :WIDTH // 2] == background()).all()

def test_particles_render_without_clones(build):
    _, pipeline = build(frame=None)
    pipeline.particles.emit(WIDTH // 2, HEIGHT // 2, 1, "spawn")
    surface = pipeline.tick(16)
    assert not np.array_equal(surface[HEIGHT // 2, WIDTH // 2], background())

def test_transition_events_feed_particles(build):
    _, pipeline = build(frame=live_frame(), dismiss_duration_ms=100)
    pipeline.spawn(1)
    pipeline.tick(16)
    assert pipeline.particles.count == config.PARTICLES_PER_BURST

    pipeline.tick(2000)
    pipeline.particles.clear()
    pipeline.dismiss()
    pipeline.tick(16)
    pipeline.tick(100)
    assert pipeline.clone_manager.count == 0
    assert pipeline.particles.count > 0

def test_dismiss_without_clones_emits_nothing(build):
    _, pipeline = build(frame=live_frame())
    pipeline.dismiss()
    pipeline.tick(16)
    assert pipeline.clone_manager.count == 0
    assert pipeline.particles.count == 0

def test_smoke_can_be_disabled(build):
    _, pipeline = build(frame=live_frame())
    pipeline.set_smoke_effects(False)
    pipeline.spawn(2)
    pipeline.tick(1000)
    assert pipeline.particles.count == 0

def test_clear_drops_all_state(build):
    _, pipeline = build(frame=live_frame())
    warm_up(pipeline)
    pipeline.spawn(3)
    pipeline.tick(16)
    pipeline.clear()
    assert pipeline.clone_manager.count == 0
    assert pipeline.particles.count == 0
    assert len(pipeline.frame_buffer) == 0

def test_apply_settings(build):
    _, pipeline = build(frame=live_frame())
    pipeline.apply_settings(PerformanceSettings(
        max_clones=3,
        segmentation_enabled=True,
        segmentation_resolution=128,
        smoke_effects_enabled=False,
        frame_buffer_scale=0.5,
    ))
    assert pipeline.clone_manager.max_clones == 3
    assert pipeline.frame_buffer.scale == 0.5
    assert pipeline.smoke_enabled is False
    # No segmenter attached
    assert pipeline.use_segmentation is False

def test_scaled_history_still_draws_full_size_clones(build):
    _, pipeline = build(frame=live_frame())
    pipeline.set_buffer_scale(0.5)
    warm_up(pipeline)
    pipeline.spawn(1)
    pipeline.tick(1000)
    pipeline.surface[:] = 0
    pipeline.draw_clones()
    assert pipeline.surface.sum() > 0

def test_resize_reallocates_buffers(build):
    _, pipeline = build(frame=live_frame())
    pipeline.resize(200, 100)
    assert pipeline.surface.shape == (100, 200, 3)
    assert pipeline.scratch.shape == (100, 200, 4)
    assert pipeline.clone_manager.bounds == (200, 100)
    # Live frames of another size are scaled to the surface
    assert pipeline.tick(16).shape == (100, 200, 3)

def test_alpha_paste_clips_at_edges():
    dst = np.zeros((10, 10, 3), dtype=np.uint8)
    fg = np.full((6, 6, 3), 100, dtype=np.uint8)
    alpha_paste(dst, fg, np.ones((6, 6), dtype=np.float32), 7, -2)
    assert (dst[0:4, 7:10] == 100).all()
    assert dst[:, :7].sum() == 0
    assert dst[4:, :].sum() == 0

def test_tier_settings_turn_segmentation_on(build, segmenter_cls):
    segmenter = segmenter_cls(alpha=None)
    _, pipeline = build(frame=live_frame(), segmenter=segmenter)
    assert pipeline.use_segmentation is False
    pipeline.apply_settings(PerformanceSettings(segmentation_enabled=True, segmentation_resolution=144))
    assert pipeline.use_segmentation is True
    assert segmenter.started is True
    assert segmenter.resolution == 144

def test_segmentation_override_survives_tier_changes(build, segmenter_cls):
    _, pipeline = build(frame=live_frame(), segmenter=segmenter_cls(alpha=None))
    pipeline.override_segmentation(False)
    pipeline.apply_settings(PerformanceSettings(segmentation_enabled=True))
    assert pipeline.use_segmentation is False

    pipeline.override_segmentation(True)
    pipeline.apply_settings(PerformanceSettings(segmentation_enabled=False))
    assert pipeline.use_segmentation is True
