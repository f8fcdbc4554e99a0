"""
Path reconstruction from the two frontier trees
"""

from typing import List, Optional, Tuple

from six_degrees.frontier import Frontier
from six_degrees.models import PathMovie

# (actor id, movie linking the previous actor on the path to this one)
PathStep = Tuple[int, Optional[PathMovie]]


def reconstruct_path(meeting_actor_id: int, side_a: Frontier, side_b: Frontier) -> List[PathStep]:
    """
    Build the ordered actor path A -> meeting actor -> B

    The A-side walk already carries the right movies: a node's movie links
    it to its parent, which precedes it on the path. B-side nodes point the
    other way, so each one takes the movie stored on the node before it
    (its child in the B tree), starting with the meeting actor's B-side movie.

    Args:
        meeting_actor_id: Actor reached by both sides
        side_a: Frontier rooted at actor A
        side_b: Frontier rooted at actor B

    Returns:
        Steps from A to B; the meeting actor appears exactly once
    """
    steps: List[PathStep] = [(node.actor_id, node.movie) for node in side_a.ancestry(meeting_actor_id)]
    steps.reverse()

    b_nodes = side_b.ancestry(meeting_actor_id)
    incoming = next(b_nodes).movie
    for node in b_nodes:
        steps.append((node.actor_id, incoming))
        incoming = node.movie

    return steps


def outgoing_movies(steps: List[PathStep]) -> List[Optional[PathMovie]]:
    """
    Movie shown next to each actor: the one leading to the next actor

    A step stores the movie leading into it, so position i displays the
    movie of step i + 1. The last actor has no outgoing movie.
    """
    return [next_movie for _, next_movie in steps[1:]] + [None]
