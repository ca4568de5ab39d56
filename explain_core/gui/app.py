import asyncio
import threading
import tkinter as tk
from concurrent.futures import Future
from tkinter import filedialog, messagebox, scrolledtext
from typing import Optional

from explain_core.agents.orchestrator import ConversationOrchestrator, OrchestratorConfig
from explain_core.config.settings import settings
from explain_core.domain.exceptions import BusinessError
from explain_core.domain.models import OrchestratorState
from explain_core.providers import create_client
from explain_core.sources import WhisperSpeechSource, source_for_paths

WELCOME_TEXT = "To get started, tap the button below to scan a document or some notes."
SCANNING_TEXT = "Reading your document..."


class LoopThread:
    """Event loop on a daemon thread; every orchestrator coroutine runs here."""

    def __init__(self):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self.loop.run_forever, daemon=True)
        self._thread.start()

    def submit(self, coro) -> Future:
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def stop(self):
        self.loop.call_soon_threadsafe(self.loop.stop)


class App:
    def __init__(self, root, orchestrator: ConversationOrchestrator):
        self.root = root
        self.root.title("ExplainGPT")
        self.orchestrator = orchestrator
        self.runner = LoopThread()
        self.listen_future: Optional[Future] = None
        top = tk.Frame(root)
        top.pack(fill=tk.X)
        tk.Label(top, text="Search").pack(side=tk.LEFT)
        self.search_entry = tk.Entry(top)
        self.search_entry.pack(side=tk.LEFT, fill=tk.X, expand=True)
        self.search_entry.bind("<Return>", self.on_search_event)
        self.result_view = scrolledtext.ScrolledText(root, width=80, height=20, wrap=tk.WORD)
        self.result_view.pack(fill=tk.BOTH, expand=True)
        self.result_view.tag_config("placeholder", foreground="#5f6368")
        btns = tk.Frame(root)
        btns.pack(fill=tk.X)
        self.scan_btn = tk.Button(btns, text="Scan Document", command=self.on_scan)
        self.scan_btn.pack(side=tk.LEFT)
        self.ask_btn = tk.Button(btns, text="Ask", command=self.on_ask)
        self.ask_btn.pack(side=tk.LEFT)
        tk.Button(btns, text="Reset", command=self.on_reset).pack(side=tk.RIGHT)
        self.status = tk.Label(root, text="Ready", anchor=tk.W)
        self.status.pack(fill=tk.X)
        self.orchestrator.add_listener(self.on_state)
        self.render(self.orchestrator.state())

    def on_state(self, state: OrchestratorState):
        # Called on the loop thread; hand the snapshot to Tk
        self.root.after(0, lambda: self.render(state))

    def render(self, state: OrchestratorState):
        self.result_view.config(state=tk.NORMAL)
        self.result_view.delete(1.0, tk.END)
        if state.result is not None:
            self.result_view.insert(tk.END, state.result)
        elif state.document_scanned:
            self.result_view.insert(tk.END, SCANNING_TEXT, "placeholder")
        else:
            self.result_view.insert(tk.END, WELCOME_TEXT, "placeholder")
        self.result_view.config(state=tk.DISABLED)
        if state.listening:
            self.status.config(text="Listening...")
        elif state.busy:
            self.status.config(text="Explaining...")
        else:
            self.status.config(text="Ready")
        self.ask_btn.config(text="Stop" if state.listening else "Ask")
        self.scan_btn.config(state=tk.DISABLED if state.busy else tk.NORMAL)

    def on_scan(self):
        paths = filedialog.askopenfilenames(
            title="Scan Document",
            filetypes=[("Pages", "*.png *.jpg *.jpeg *.tif *.tiff *.bmp *.txt"), ("All files", "*")],
        )
        if not paths:
            return
        source = source_for_paths(paths, settings)
        self._watch(self.runner.submit(self.orchestrator.scan_document(source)))

    def on_ask(self):
        # Stop only interrupts transcription; a submitted question keeps running
        if self.orchestrator.listening and self.listen_future is not None and not self.listen_future.done():
            self.listen_future.cancel()
            self.listen_future = None
            return
        path = filedialog.askopenfilename(
            title="Ask",
            filetypes=[("Audio", "*.wav *.mp3 *.m4a *.ogg *.flac"), ("All files", "*")],
        )
        if not path:
            return
        self.listen_future = self.runner.submit(self.orchestrator.listen(WhisperSpeechSource(path, settings)))
        self._watch(self.listen_future)

    def on_search(self):
        query = self.search_entry.get().strip()
        if not query:
            return
        self._watch(self.runner.submit(self.orchestrator.search(query)))

    def on_search_event(self, event):
        self.on_search()
        return "break"

    def on_reset(self):
        self.runner.loop.call_soon_threadsafe(self.orchestrator.reset_conversation)

    def _watch(self, future: Future):
        def done(fut: Future):
            if fut.cancelled():
                return
            err = fut.exception()
            if err is not None:
                self.root.after(0, lambda: self.on_error(err))

        future.add_done_callback(done)

    def on_error(self, err):
        message = err.message if isinstance(err, BusinessError) else str(err)
        self.status.config(text="Error")
        messagebox.showerror("ExplainGPT", message)

    def close(self):
        self.runner.stop()
        self.root.destroy()


def main():
    orchestrator = ConversationOrchestrator(
        client=create_client(settings),
        config=OrchestratorConfig.from_settings(settings),
    )
    root = tk.Tk()
    app = App(root, orchestrator)
    root.protocol("WM_DELETE_WINDOW", app.close)
    root.mainloop()


if __name__ == "__main__":
    main()
