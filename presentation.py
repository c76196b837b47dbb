'''
presentation.py -- bookkeeping between terrain cells and whatever draws them

The drawing side is not part of this project. It is anything with
    spawn(world_x, world_y, block_type) -> handle
    discard(handle)
Handles are opaque; they are kept here, keyed by (chunk_number, x, y), instead of on
the blocks, so terrain data stays plain and serializable.
'''
from typing import Protocol, Any

from delve_config import CHUNK_HEIGHT
import delve_config
import logutil


class Presenter(Protocol):
    def spawn(self, world_x: float, world_y: float, block_type) -> Any:
        ...

    def discard(self, handle: Any) -> None:
        ...


def to_world_point_x(x):
    return float(x) * delve_config.BLOCK_PIXELS


def to_world_point_y(y, chunk_number):
    return -(float(y) + chunk_number * CHUNK_HEIGHT) * delve_config.BLOCK_PIXELS


class HandleTable(object):
    def __init__(self, presenter):
        self.presenter = presenter
        self.handles = {}

    def __len__(self):
        return len(self.handles)

    def get(self, chunk_number, x, y):
        return self.handles.get((chunk_number, x, y))

    def render_chunk(self, chunk):
        '''
        spawn a handle for every block of `chunk` that isn't already shown
        '''
        logutil.log("RENDER", f"rendering chunk #{chunk.chunk_number}", level="DEBUG")
        n = chunk.chunk_number
        for x, y, block in chunk.iter_blocks():
            key = (n, x, y)
            if key in self.handles:
                continue
            handle = self.presenter.spawn(to_world_point_x(x), to_world_point_y(y, n), block.block_type)
            self.handles[key] = handle

    def derender_chunk(self, chunk_number):
        logutil.log("RENDER", f"derendering chunk #{chunk_number}", level="DEBUG")
        for key in [k for k in self.handles if k[0] == chunk_number]:
            self.presenter.discard(self.handles.pop(key))

    def discard_block(self, chunk_number, x, y):
        '''
        discard the handle of one destroyed block; returns False if it had none
        '''
        handle = self.handles.pop((chunk_number, x, y), None)
        if handle is None:
            return False
        self.presenter.discard(handle)
        return True

    def clear(self):
        for handle in self.handles.values():
            self.presenter.discard(handle)
        self.handles = {}
