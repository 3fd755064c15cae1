# chatup

chatup is a small chat room that runs over TCP. One process runs the server,
which relays what clients say. Each participant runs the client, a
line-oriented terminal program. The client asks for a server address, a port
and a user name, then shows the chat below the list of people in the room.

The package needs only the standard library.

## Installing

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Running a server

The server takes the address to bind to and the port to listen on:

```
chatup-server 127.0.0.1 6969
```

Use `127.0.0.1` if only local clients should reach the server. For a LAN
server, give the machine's private network address instead.

In these cases the server prints a usage message or an error and exits with
status -1:

- an argument is missing;
- the port is not a number from 0 to 65535;
- the address is not an IP address;
- the address cannot be bound.

Once it is running, the server logs connections and disconnections to the
terminal. Ctrl+C stops it.

The server holds at most 256 hosts. When a connection arrives while it is
full, it refuses that connection and then stops accepting new ones.

## Running a client

```
chatup-client
```

The client takes no arguments. It starts on a form with three fields: the
server address, the port and the user name. Each line you type fills the
next field. After the third line, the client connects. If any field was left
empty, all three are cleared and the prompts ask for valid values.

When the server sends back your host ID, the client switches to the chat
view. That view lists the participants and then the messages. Every line you
type there is posted as a message. Your own messages appear in your view at
once, and the server passes them on to every other participant.

When a client joins, the server tells it who is already in the room and tells
everyone else about the newcomer. When a client leaves, the others are told
and that client drops off their participant list.

The screen is redrawn only when its content changes. On a terminal it is
cleared before each redraw. The client exits at end of input (Ctrl+D, or
Ctrl+Z then Enter on Windows) or on Ctrl+C.

## What it does not do

- The client draws plain text lines. It has no graphical window, and the
  window sizes that `chatup.gui` keeps are bookkeeping only.
- Nothing is stored. Neither side keeps chat history, so a newcomer sees only
  messages posted after it joined.
- Traffic is not encrypted and users are not authenticated. A user name is
  whatever the client sends.
- If the server goes away, the client stays in the chat view. It does not
  reconnect, and messages posted after that are dropped.

## Using the pieces

The modules can also be used as a library.

- `chatup.messages` defines the wire format. Each `Message` has a header and
  a body.
  - The header holds a `MessageID` and the body size. `header_bytes` encodes
    it, and `decode_header` reads it back from raw bytes.
  - `add_uint32` and `add_buffer` append values to the body.
    `retrieve_uint32` and `retrieve_buffer` read them back last in, first
    out. A malformed body raises `MessageError`.
  - The packs `ChatMessage`, `HostConnection`, `ConnectionEstablished`,
    `ServerData` and `HostDisconnected` each write themselves with
    `serialize_into` and are rebuilt with the class method
    `deserialize_from`.
- `chatup.events` holds the application events, such as `ServerChosen`,
  `ChatMessagePosted` and `HostConnected`, together with their `EventType`.
  It also provides:
  - the `Broadcaster`, which calls every callback subscribed to an event's
    type;
  - `InternalEvent`, a hook with a single callback, grouped into `HostEvents`
    and `GUIEvents`;
  - the `Component` and `Application` base classes.
- `chatup.host`, `chatup.server` and `chatup.client` handle the network side.
  - `Host` is one framed connection that reads and writes on background
    threads.
  - `Server` accepts hosts and routes messages to them. It can be used as a
    context manager.
  - `Client` holds a single connection to a server. It can also be used as a
    context manager.
- `chatup.servercomponent` holds the server's chat logic: `ServerComponent`,
  `ServerApplication`, and `main` behind `chatup-server`.
- `chatup.networkcomponent` holds the client's chat logic in
  `NetworkComponent`.
- `chatup.gui` has the text layouts and `AppGUI`, which draws through a
  `Renderer`.
- `chatup.console` provides `ConsoleRenderer`, the terminal renderer.
- `chatup.uicomponent` holds `UIComponent`, which connects the interface to
  the rest of the client.
- `chatup.clientapp` runs the client: `ClientApplication`, and `main` behind
  `chatup-client`.