"""

Telemetry relay between a serial device and remote WebSocket clients.

- Conduit: the serial port to the device. Bytes read are handed to the telemetry pipeline,
  commands are written back.
- Telemetry pipeline: assembles frames from the bytes read, and decides per frame whether to
  publish the decoded Reading or only archive the frame in the log.
- Subscriber registry: delivers each published reading to every registered subscriber.
- Channel: a persistent outbound connection, such as a WebSocket to <base>/data or <base>/control.
- Supervisor: tracks whether a channel is connected, and reconnects it. Supervisors are ticked
  by their subscriber each time a reading is published, so reconnection follows the telemetry.
- Command relay: commands received from the control channel are buffered and written to the
  device by a dedicated writer thread.
- Controller: starts and stops all of the above.


## Threading

- the serial reader thread reads from the port and runs the whole publish pipeline, including
  supervision of the channels.
- the command writer thread waits for commands and writes them to the port. A failed write is
  retried until the device accepts it.
- each control channel has a thread receiving messages from the WebSocket.
- the main thread waits for a signal to shut down.

The command buffer is the only state shared between the reader and the writer.
The subscriber registry is changed by the main thread and read by the reader thread.

"""
