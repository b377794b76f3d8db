"""
Collision Detector
==================

Pure hit test between the character box, the obstacle pair and the world
bounds. Boxes are pymunk bounding boxes in screen coordinates (Y grows
downward, so a BB's `bottom` field holds the smaller Y).
"""

from __future__ import annotations

from dataclasses import dataclass

import pymunk

from merry_flappy.flappy_core.obstacles import ObstaclePair


@dataclass(frozen=True)
class CollisionResult:
    """Result of a collision check."""
    hit: bool
    reason: str

    @staticmethod
    def none() -> "CollisionResult":
        return CollisionResult(False, "")

    @staticmethod
    def of(reason: str) -> "CollisionResult":
        return CollisionResult(True, reason)


def character_bb(character_y: float, slot_x: float, size: float) -> pymunk.BB:
    """Bounding box of the character in its fixed slot."""
    return pymunk.BB(slot_x, character_y, slot_x + size, character_y + size)


def obstacle_bbs(pair: ObstaclePair, world_height: float) -> tuple:
    """Bounding boxes of the upper and lower obstacle."""
    upper = pymunk.BB(pair.x, 0.0, pair.right, pair.gap_top)
    lower = pymunk.BB(pair.x, pair.gap_bottom, pair.right, world_height)
    return upper, lower


def check_collision(
    character_y: float,
    obstacle_x: float,
    gap_top: float,
    gap_height: float,
    *,
    slot_x: float,
    character_size: float,
    obstacle_width: float,
    world_height: float
) -> CollisionResult:
    """
    Evaluate the post-motion state for a hit.

    Vertically, touching counts: BB.intersects is inclusive, so a character
    whose top edge sits exactly on gap_top (or whose bottom edge sits on the
    gap bottom) hits. Horizontally the obstacle must overlap the slot; an
    obstacle edge that only touches the slot edge is not a hit.
    Out-of-bounds is checked regardless of obstacle overlap.

    Args:
        character_y: Top edge of the character.
        obstacle_x: Left edge of the obstacle pair.
        gap_top: Y of the top of the gap.
        gap_height: Height of the gap.
        slot_x: Left edge of the character slot.
        character_size: Character box side.
        obstacle_width: Obstacle width.
        world_height: Height of the viewport.

    Returns:
        CollisionResult with reason "floor", "ceiling", "obstacle_top",
        "obstacle_bottom", or not hit.
    """
    if character_y >= world_height - character_size:
        return CollisionResult.of("floor")
    if character_y <= 0:
        return CollisionResult.of("ceiling")

    pair = ObstaclePair(obstacle_x, gap_top, gap_height, obstacle_width)
    if not (pair.x < slot_x + character_size and pair.right > slot_x):
        return CollisionResult.none()

    bird = character_bb(character_y, slot_x, character_size)
    upper, lower = obstacle_bbs(pair, world_height)

    if bird.intersects(upper):
        return CollisionResult.of("obstacle_top")
    if bird.intersects(lower):
        return CollisionResult.of("obstacle_bottom")

    return CollisionResult.none()
