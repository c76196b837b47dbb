# standard library imports
import select
import sys
import time
import traceback

# local imports
from players import Player, ClientPlayer
from terrain import DestroyBlockError
from world_store import TerrainStore
import delve_config
import logutil
import msocket
import world_delta


class ServerConnectionHandler(object):
    '''
    Handles the low level connection handling details of the multiplayer server
    '''
    def __init__(self, listener=None):
        if listener is None:
            logutil.log("SERVER", f"starting server at {delve_config.SERVER_IP}:{delve_config.SERVER_PORT}")
            listener = msocket.Listener(delve_config.SERVER_IP, delve_config.SERVER_PORT)
        self.listener = listener
        self.players = []
        self.fn_dict = {}
        self.server_owner = None

    def register_function(self, name, fn):
        self.fn_dict[name] = fn

    def call_function(self, name, *args):
        return self.fn_dict[name](*args)

    def connections(self):
        return [p.conn for p in self.players]

    def connections_with_comms(self):
        return [p.conn for p in self.players if len(p.comms_queue) > 0]

    def accept_connection(self):
        conn = self.listener.accept()
        player = Player(conn)
        self.players.append(player)
        return player

    def drop_player(self, p):
        p.conn.close()
        if p in self.players:
            self.players.remove(p)
        self.queue_for_all_players(p, 'other_player_leave', p.id)

    def handle_message(self, p, msg, data):
        logutil.log("SERVER", f"received {msg} from player {p.id} ({p.name})", level="DEBUG")
        if msg == 'quit':
            logutil.log("SERVER", f"player {p.id} requested disconnect")
            self.drop_player(p)
            return
        try:
            self.call_function(msg, p, *data)
        except Exception:
            logutil.log("SERVER", f"handler for {msg} failed:\n{traceback.format_exc()}", level="ERROR")

    def serve_once(self, timeout):
        '''
        wait up to `timeout` seconds for network activity and handle it
        '''
        r, w, x = select.select([self.listener] + self.connections(), self.connections_with_comms(), [], timeout)
        accept_new = True
        for p in list(self.players):
            if p.conn in r:
                accept_new = False
                try:
                    result = p.conn.recv()
                except EOFError:
                    logutil.log("SERVER", f"disconnect EOF for player {p.id} ({p.name})", level="WARN")
                    self.drop_player(p)
                    continue
                if result is not None:
                    msg, data = result
                    self.handle_message(p, msg, data)
        for p in self.players:
            if p.conn in w:
                self.dispatch_top_message(p)
        if accept_new and self.listener in r:
            p = self.accept_connection()
            logutil.log("SERVER", f"connected new player id {p.id}")
            if self.server_owner is not None:
                self.server_owner.player_connected(p)

    def serve(self, tick):
        '''
        network loop; `tick` is called TICKS_PER_SEC times a second between network work
        '''
        period = 1.0 / delve_config.TICKS_PER_SEC
        next_tick = time.perf_counter()
        while True:
            try:
                self.serve_once(max(0.0, min(delve_config.SELECT_TIMEOUT, next_tick - time.perf_counter())))
            except KeyboardInterrupt:
                logutil.log("SERVER", "received keyboard interrupt", level="WARN")
                break
            if time.perf_counter() >= next_tick:
                tick()
                next_tick += period
        self.listener.close()

    def queue_for_player(self, player, message, *data):
        player.comms_queue.append([message, player.id, data])

    def queue_for_others(self, player, message, *data):
        for p in self.players:
            if p != player:
                p.comms_queue.append([message, player.id, data])

    def queue_for_all_players(self, player, message, *data):
        sender = player.id if player is not None else None
        for p in self.players:
            p.comms_queue.append([message, sender, data])

    def other_players(self, player):
        return [p for p in self.players if p != player]

    def dispatch_top_message(self, player):
        logutil.log("SERVER", f"sending {player.comms_queue[0][0]} to {player.id} ({player.name})", level="DEBUG")
        player.conn.send(player.comms_queue.pop(0))


class WorldServer(object):
    '''
    Authoritative world server: owns the TerrainStore, grows it below the players every
    tick and turns accepted block destruction into deltas for every client.

    Server Messages (client must have handlers for these)
        connected(player, players)
            notifies the player that just connected with a list of all `players`
        world_delta(encoded)
            an encoded WorldDelta (a terrain baseline or a single block removal)
        destroy_block_rejected(x, y, reason)
            sent only to the player whose destroy_block request failed
        other_player_join(player) / other_player_leave(player_id) / player_set_position(id, position)

    Client Messages
        set_name(name), set_position(position), destroy_block(x, y), quit
    '''
    def __init__(self, store=None, handler=None):
        if store is None:
            store = TerrainStore(delve_config.BASE_SEED)
        if handler is None:
            handler = ServerConnectionHandler()
        self.store = store
        self.handler = handler
        self.handler.server_owner = self
        self.tick_count = 0
        if len(self.store) == 0:
            self.store.create_world()
        world_delta.log_encoding_sizes()
        self.handler.register_function('set_name', self.set_name)
        self.handler.register_function('set_position', self.set_position)
        self.handler.register_function('destroy_block', self.destroy_block)

    def run(self):
        try:
            self.handler.serve(self.tick)
        finally:
            self.shutdown()

    def shutdown(self):
        logutil.log("SERVER", "shutting down")
        self.store.destroy_world()

    def broadcast(self, delta):
        try:
            encoded = world_delta.encode_delta(delta)
        except world_delta.CodecError as ex:
            logutil.log("SERVER", f"unable to encode {type(delta).__name__}: {ex}", level="ERROR")
            return None
        self.handler.queue_for_all_players(None, 'world_delta', encoded)
        return encoded

    def tick(self):
        '''
        once per server tick: read every player's depth, then generate ahead of the deepest
        '''
        self.tick_count += 1
        logutil.set_tick(self.tick_count)
        ys = [p.y for p in self.handler.players]
        new_chunks = self.store.ensure_generated_for_positions(ys)
        if new_chunks:
            self.broadcast(self.store.baseline([c.chunk_number for c in new_chunks]))
        logutil.log("TICK", f"tick {self.tick_count}, {len(ys)} players, {len(self.store)} chunks")
        return new_chunks

    def player_connected(self, player):
        self.handler.queue_for_player(player, 'connected', ClientPlayer(player),
                                      [ClientPlayer(ap) for ap in self.handler.players])
        self.handler.queue_for_others(player, 'other_player_join', ClientPlayer(player))
        try:
            encoded = world_delta.encode_delta(self.store.baseline())
        except world_delta.CodecError as ex:
            logutil.log("SERVER", f"unable to encode baseline for player {player.id}: {ex}", level="ERROR")
            return
        logutil.log("SERVER", f"sending {len(encoded)} byte baseline to player {player.id}")
        self.handler.queue_for_player(player, 'world_delta', encoded)

    def set_name(self, player, name):
        '''
        sets the unique name for the player (ignored if another player already uses it)
        '''
        if any(op.name == name for op in self.handler.other_players(player)):
            return
        player.name = name
        self.handler.queue_for_all_players(player, 'player_set_name', player.id, player.name)

    def set_position(self, player, position):
        '''
        records the `position` (x, y) of `player` for the next tick's generation check
        '''
        player.position = (float(position[0]), float(position[1]))
        self.handler.queue_for_others(player, 'player_set_position', player.id, player.position)

    def destroy_block(self, player, x, y):
        '''
        player request to destroy the block at global column `x`, global row `y`
        '''
        try:
            block, delta = self.store.destroy_block_delta(x, y)
        except DestroyBlockError as ex:
            logutil.log("SERVER", f"player {player.id} could not destroy block: {ex}", level="DEBUG")
            self.handler.queue_for_player(player, 'destroy_block_rejected', x, y, type(ex).__name__)
            return None
        logutil.log("SERVER", f"player {player.id} destroyed {block.block_type.name} at ({x}, {y})")
        self.broadcast(delta)
        return block


if __name__ == '__main__':
    logutil.configure()
    delve_config.SERVER_IP = 'localhost'
    if len(sys.argv) > 1:
        if sys.argv[1] == 'LAN':
            delve_config.SERVER_IP = msocket.get_network_ip()
        elif ':' in sys.argv[1]:
            host, port = sys.argv[1].split(':', 1)
            delve_config.SERVER_IP = host
            try:
                delve_config.SERVER_PORT = int(port)
            except ValueError:
                pass
        else:
            delve_config.SERVER_IP = sys.argv[1]
    WorldServer().run()
