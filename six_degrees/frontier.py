"""
Search frontiers for the bidirectional BFS

Each side of the search keeps its nodes in an arena (a plain list) and
links a node to its parent by index, so the two parent trees are flat,
acyclic by construction and easy to dump for inspection.
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterator, List, Optional

from six_degrees.models import PathMovie


@dataclass
class SearchNode:
    """An actor reached by one side of the search."""

    actor_id: int
    parent: Optional[int] = None  # Arena index of the parent; None only for the root
    movie: Optional[PathMovie] = None  # Movie linking the parent to this actor


class Frontier:
    """
    One side of the bidirectional search

    Attributes:
        nodes: Node arena, the root is always at index 0
        visited: Actor id -> arena index (unique per actor id)
        queue: Arena indices waiting to be expanded
        depth: Number of levels expanded so far
    """

    def __init__(self, root_actor_id: int, name: str = ''):
        self.name = name
        self.root_actor_id = root_actor_id
        self.nodes: List[SearchNode] = [SearchNode(root_actor_id)]
        self.visited: Dict[int, int] = {root_actor_id: 0}
        self.queue: Deque[int] = deque([0])
        self.depth = 0

    def __contains__(self, actor_id: int) -> bool:
        return actor_id in self.visited

    def __len__(self) -> int:
        return len(self.visited)

    def node(self, actor_id: int) -> SearchNode:
        return self.nodes[self.visited[actor_id]]

    def add(self, actor_id: int, parent: int, movie: PathMovie, enqueue: bool = True) -> int:
        """
        Record an actor reached from the node at arena index `parent`

        Returns:
            Arena index of the new node
        """
        self.nodes.append(SearchNode(actor_id, parent, movie))
        index = len(self.nodes) - 1
        self.visited[actor_id] = index
        if enqueue:
            self.queue.append(index)
        return index

    def next_level(self) -> List[int]:
        """
        Dequeue exactly the nodes queued before this level starts

        Nodes discovered while the level is processed are appended to the
        same queue and belong to the next level.
        """
        level_size = len(self.queue)
        self.depth += 1
        return [self.queue.popleft() for _ in range(level_size)]

    def ancestry(self, actor_id: int) -> Iterator[SearchNode]:
        """Walk parent links from an actor's node up to the root (inclusive)"""
        index: Optional[int] = self.visited[actor_id]
        while index is not None:
            node = self.nodes[index]
            yield node
            index = node.parent

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'root': self.root_actor_id,
            'depth': self.depth,
            'nodes': [
                {
                    'actor_id': node.actor_id,
                    'parent': node.parent,
                    'movie': node.movie.model_dump() if node.movie else None
                }
                for node in self.nodes
            ]
        }
