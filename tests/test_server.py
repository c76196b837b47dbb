import os
import sys

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from delve_config import CHUNK_HEIGHT
from blocks import Block, BlockType
from terrain import Chunk
from world_store import TerrainStore
from server import ServerConnectionHandler, WorldServer
from world_client import TerrainReplica
import world_delta


class RecordingBuilder(object):
    seed = 7

    def __init__(self):
        self.built = []

    def build(self, chunk_number):
        self.built.append(chunk_number)
        chunk = Chunk.empty(chunk_number)
        chunk.blocks[:] = int(BlockType.Basalt)
        return chunk


class FakeConn(object):
    def __init__(self):
        self.sent = []
        self.closed = False

    def send(self, obj):
        self.sent.append(obj)

    def close(self):
        self.closed = True


class FakeListener(object):
    def __init__(self):
        self.pending = []

    def accept(self):
        return self.pending.pop(0)

    def close(self):
        pass


def _server():
    listener = FakeListener()
    handler = ServerConnectionHandler(listener)
    server = WorldServer(TerrainStore(builder=RecordingBuilder()), handler)
    return server, handler, listener


def _connect(server, handler, listener):
    listener.pending.append(FakeConn())
    player = handler.accept_connection()
    server.player_connected(player)
    return player


def _messages(player, name):
    return [m for m in player.comms_queue if m[0] == name]


def _deltas(player):
    return [world_delta.decode_delta(m[2][0]) for m in _messages(player, 'world_delta')]


def test_new_server_creates_the_world():
    server, handler, listener = _server()
    assert server.store.terrain.chunk_numbers() == [0, 1]


def test_connect_sends_full_baseline():
    server, handler, listener = _server()
    player = _connect(server, handler, listener)
    assert _messages(player, 'connected')
    (baseline,) = _deltas(player)
    assert isinstance(baseline, world_delta.NewChunks)
    assert baseline.terrain.chunk_numbers() == [0, 1]
    replica = TerrainReplica()
    for m in _messages(player, 'world_delta'):
        replica.apply_bytes(m[2][0])
    assert replica.terrain == server.store.terrain


def test_second_player_is_announced():
    server, handler, listener = _server()
    first = _connect(server, handler, listener)
    second = _connect(server, handler, listener)
    joins = _messages(first, 'other_player_join')
    assert len(joins) == 1 and joins[0][1] == second.id


def test_tick_generates_ahead_of_deepest_player():
    server, handler, listener = _server()
    player = _connect(server, handler, listener)
    shallow = _connect(server, handler, listener)
    server.set_position(player, (10.0, -5.0 * CHUNK_HEIGHT))
    server.set_position(shallow, (3.0, 20.0))
    player.comms_queue.clear()
    new_chunks = server.tick()
    assert [c.chunk_number for c in new_chunks] == list(range(2, 8))
    assert server.store.builder.built == list(range(0, 8))
    (delta,) = _deltas(player)
    assert delta.terrain.chunk_numbers() == list(range(2, 8))
    # nothing new on the next tick
    player.comms_queue.clear()
    assert server.tick() == []
    assert _deltas(player) == []


def test_destroy_block_is_broadcast():
    server, handler, listener = _server()
    miner = _connect(server, handler, listener)
    watcher = _connect(server, handler, listener)
    for p in (miner, watcher):
        p.comms_queue.clear()
    handler.handle_message(miner, 'destroy_block', (4, CHUNK_HEIGHT + 2))
    assert not server.store.block_exists(4, CHUNK_HEIGHT + 2)
    for p in (miner, watcher):
        assert _deltas(p) == [world_delta.BlockDelete(1, 4, 2)]


def test_destroy_block_rejections_go_to_the_requester_only():
    server, handler, listener = _server()
    miner = _connect(server, handler, listener)
    watcher = _connect(server, handler, listener)
    assert server.destroy_block(miner, 0, 0) == Block(BlockType.Basalt)
    for p in (miner, watcher):
        p.comms_queue.clear()
    handler.handle_message(miner, 'destroy_block', (0, 0))
    handler.handle_message(miner, 'destroy_block', (500, 0))
    handler.handle_message(miner, 'destroy_block', (0, 40 * CHUNK_HEIGHT))
    reasons = [m[2][2] for m in _messages(miner, 'destroy_block_rejected')]
    assert reasons == ['BlockDoesntExist', 'InvalidX', 'ChunkNotLoaded']
    assert watcher.comms_queue == []
    assert _deltas(miner) == []


def test_bad_messages_do_not_stop_the_server():
    server, handler, listener = _server()
    player = _connect(server, handler, listener)
    handler.handle_message(player, 'no_such_message', ())
    handler.handle_message(player, 'destroy_block', ('x',))
    assert handler.players == [player]


def test_set_position_and_name():
    server, handler, listener = _server()
    player = _connect(server, handler, listener)
    other = _connect(server, handler, listener)
    handler.handle_message(player, 'set_position', ((1, -70),))
    assert player.position == (1.0, -70.0)
    assert player.y == -70.0
    assert _messages(other, 'player_set_position')[-1][2] == (player.id, (1.0, -70.0))
    server.set_name(player, 'DIGGER')
    server.set_name(other, 'DIGGER')
    assert player.name == 'DIGGER'
    assert other.name == 'MINER'


def test_quit_drops_player():
    server, handler, listener = _server()
    player = _connect(server, handler, listener)
    other = _connect(server, handler, listener)
    handler.handle_message(player, 'quit', ())
    assert handler.players == [other]
    assert player.conn.closed
    assert _messages(other, 'other_player_leave')[-1][2] == (player.id,)


def test_dispatch_sends_queued_messages_in_order():
    server, handler, listener = _server()
    player = _connect(server, handler, listener)
    names = [m[0] for m in player.comms_queue]
    while player.comms_queue:
        handler.dispatch_top_message(player)
    assert [m[0] for m in player.conn.sent] == names
    assert names[0] == 'connected'


def test_shutdown_destroys_the_world():
    server, handler, listener = _server()
    server.shutdown()
    assert len(server.store) == 0
