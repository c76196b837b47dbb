'''
world_client.py -- client side copy of the terrain, kept in sync by applying the
server's world deltas
'''
import select

from terrain import Terrain
import delve_config
import msocket
import world_delta

import logging
def client_log(msg, *args, level=logging.INFO):
    logging.getLogger('delve.client').log(level, 'CLIENT: '+msg, *args)


class TerrainReplica(object):
    '''
    The part of the world a client knows about. Starts empty at session start, is
    filled by baselines and thinned by block deletions; `close` releases it at
    session end. An optional HandleTable is kept in step with the blocks.
    '''
    def __init__(self, handles=None):
        client_log('creating terrain on client')
        self.terrain = Terrain.empty()
        self.handles = handles

    def apply_bytes(self, data):
        '''
        decode and apply one encoded delta; a message that can't be decoded is
        dropped (returns None) and the terrain is left as it was
        '''
        try:
            delta = world_delta.decode_delta(data)
        except world_delta.CodecError as ex:
            client_log('dropping undecodable world delta (%d bytes): %s', len(data), ex, level=logging.WARNING)
            return None
        self.apply(delta)
        return delta

    def apply(self, delta):
        if isinstance(delta, world_delta.NewChunks):
            for chunk in delta.terrain.chunks:
                if self.handles is not None and chunk.chunk_number in self.terrain:
                    self.handles.derender_chunk(chunk.chunk_number)
                self.terrain.add_chunk(chunk)
                if self.handles is not None:
                    self.handles.render_chunk(chunk)
            client_log('received %d chunks, %s', len(delta.terrain), self.terrain.describe())
        elif isinstance(delta, world_delta.BlockDelete):
            chunk = self.terrain.get_chunk(delta.chunk_number)
            if chunk is None:
                client_log('block delete for chunk %d which is not loaded', delta.chunk_number, level=logging.DEBUG)
                return
            chunk.clear_block(delta.x, delta.y)
            if self.handles is not None:
                self.handles.discard_block(delta.chunk_number, delta.x, delta.y)
        else:
            raise TypeError(f'not a world delta: {delta!r}')

    def get_block(self, x, y):
        return self.terrain.get_block(x, y)

    def block_exists(self, x, y):
        return self.terrain.block_exists(x, y)

    def close(self):
        client_log('destroying world')
        if self.handles is not None:
            self.handles.clear()
        self.terrain.clear()


class ClientServerConnection(object):
    '''
    Connection from a client to the world server. Incoming world deltas are applied
    to `replica`; other messages are passed to handlers registered by name.
    '''
    def __init__(self, replica, ip=None, port=None, conn=None):
        if conn is None:
            ip = ip or delve_config.SERVER_IP
            port = port or delve_config.SERVER_PORT
            client_log('connecting to server at %s:%i', ip, port)
            conn = msocket.Client(ip, port)
        self._conn = conn
        self.replica = replica
        self.player_id = None
        self._fn_dict = {}
        self.register_function('world_delta', self.world_delta)
        self.register_function('connected', self.connected)

    def register_function(self, name, fn):
        self._fn_dict[name] = fn

    def send(self, msg, *data):
        self._conn.send([msg, data])

    def set_position(self, x, y):
        self.send('set_position', (x, y))

    def destroy_block(self, x, y):
        self.send('destroy_block', x, y)

    def handle(self, result):
        msg, pid, data = result
        fn = self._fn_dict.get(msg)
        if fn is None:
            client_log('no handler for server message %s', msg, level=logging.DEBUG)
            return
        fn(pid, *data)

    def poll(self, timeout=0.0):
        '''
        handle every message already waiting on the connection; returns False once the
        server has gone away
        '''
        while True:
            r, w, x = select.select([self._conn], [], [], timeout)
            if self._conn not in r:
                return True
            try:
                result = self._conn.recv()
            except EOFError:
                client_log('server closed the connection', level=logging.WARNING)
                return False
            self.handle(result)
            timeout = 0.0

    def connected(self, pid, player, players):
        self.player_id = player.id
        client_log('joined as player %i with %d players online', player.id, len(players))

    def world_delta(self, pid, encoded):
        self.replica.apply_bytes(encoded)

    def close(self):
        try:
            self.send('quit')
        finally:
            self._conn.close()
