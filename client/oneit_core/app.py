"""
ClientApp: the Tkinter presentation layer.

Screens: login → OTP → dashboard (check-in, check-out, timesheet, logout).

Every backend call runs on a short-lived worker thread. Results come back
through a queue drained by root.after() on the main thread, so the
controllers never touch Tkinter and the UI never blocks on the network.
The owner-verification prompt is the one thing a worker asks the main
thread to do: it posts the dialog and waits on an Event.
"""

import queue
import threading
import tkinter as tk
from tkinter import messagebox

from .constants import CLIENT_VERSION, DEFAULT_SERVER_URL, THEME, MSG_UNEXPECTED_RESPONSE
from .config import log
from .auth import AuthFlowController
from .location import LocationProvider
from .models import AttendanceAction, Credentials, OtpChallenge, normalize_otp
from .outcomes import (
    Authenticated, LoggedOut, OtpRequired, SessionExpired, TimesheetLoaded,
)
from .pipeline import AttendanceGuardPipeline
from .platform_probe import PromptVerifier, UnavailableVerifier, VpnProbe
from .state import AuthState
from .timesheet import fetch_timesheet, format_date, format_duration, format_time

_FONT = "Segoe UI"


class ClientApp:
    """
    Owns the Tk main loop and wires outcomes to screens.
      _poll_results()  runs finished worker callbacks on the main thread (every 100ms)
    """

    def __init__(self, config, session_store, preferences, location=None,
                 vpn_probe=None, verifier=None):
        self._config = config
        self._session = session_store
        self._prefs = preferences
        self._auth = AuthFlowController(session_store, preferences)
        self._location = location or LocationProvider.from_config(config)
        self._vpn_probe = vpn_probe or VpnProbe()
        self._verifier = verifier
        self._pipeline = None
        self._results = queue.Queue()
        self._busy = False
        self._root = None
        self._body = None
        self._status = None

    def run(self):
        """Start the UI. Blocks on Tk mainloop. Call from main thread."""
        self._root = tk.Tk()
        self._root.title("oneIT Attendance")
        self._root.geometry("460x520")
        self._root.configure(bg=THEME["bg_darkest"])
        if self._verifier is None:
            if self._config.get("ownerVerification", "prompt") == "prompt":
                self._verifier = PromptVerifier(self._confirm_owner)
            else:
                self._verifier = UnavailableVerifier()

        self._build_frame()
        self._show_login(keep_session=True)
        self._root.after(100, self._poll_results)
        log.info("v%s UI started", CLIENT_VERSION)
        try:
            self._root.mainloop()
        finally:
            if self._auth.client is not None:
                self._auth.client.close()
            log.info("ClientApp shut down.")

    # ─── Worker dispatch ─────────────────────────────────────

    def _run_async(self, work, on_done):
        """Run `work` on a worker thread; call on_done(result) on the main thread."""
        if self._busy:
            return
        self._busy = True
        self._set_status("Please wait...", THEME["primary"])

        def target():
            try:
                result = work()
            except Exception as e:
                log.error("Worker error: %s", e, exc_info=True)
                result = e
            self._results.put((on_done, result))

        threading.Thread(target=target, daemon=True).start()

    def _navigate(self, show_screen):
        """Switch screens unless a request is still in flight."""
        if self._busy:
            log.debug("Screen change ignored while a request is in flight")
            return
        show_screen()

    def _call_on_main(self, fn):
        self._results.put((lambda _: fn(), None))

    def _poll_results(self):
        try:
            while True:
                callback, result = self._results.get_nowait()
                try:
                    if isinstance(result, Exception):
                        self._busy = False
                        self._set_status(f"Error: {MSG_UNEXPECTED_RESPONSE}", THEME["error"])
                    else:
                        callback(result)
                except tk.TclError as e:
                    log.warning("UI update skipped: %s", e)
        except queue.Empty:
            pass
        self._root.after(100, self._poll_results)

    def _confirm_owner(self, reason):
        """Runs on a worker thread: shows the confirm dialog on the main thread and waits."""
        done = threading.Event()
        answer = {"ok": False}

        def ask():
            try:
                answer["ok"] = messagebox.askyesno("Confirm it's you", reason, parent=self._root)
            finally:
                done.set()

        self._call_on_main(ask)
        done.wait()
        return answer["ok"]

    # ─── Layout helpers ──────────────────────────────────────

    def _build_frame(self):
        header = tk.Frame(self._root, bg=THEME["header_bg"], height=70)
        header.pack(fill="x")
        header.pack_propagate(False)
        tk.Label(header, text="oneIT Attendance", font=(_FONT, 16, "bold"),
                 fg="white", bg=THEME["header_bg"]).pack(expand=True)

        self._body = tk.Frame(self._root, bg=THEME["bg_darkest"], padx=35, pady=20)
        self._body.pack(fill="both", expand=True)

        self._status = tk.Label(self._root, text="", font=(_FONT, 10), wraplength=400,
                                bg=THEME["bg_darkest"], fg=THEME["text_secondary"])
        self._status.pack(pady=(0, 14))

    def _clear_body(self):
        for child in self._body.winfo_children():
            child.destroy()
        self._set_status("")

    def _set_status(self, text, color=None):
        try:
            self._status.config(text=text, fg=color or THEME["text_secondary"])
        except (tk.TclError, AttributeError):
            pass

    def _label(self, text, size=11, bold=True, color=None):
        weight = "bold" if bold else "normal"
        tk.Label(self._body, text=text, font=(_FONT, size, weight),
                 bg=THEME["bg_darkest"], fg=color or THEME["text_primary"]).pack(anchor="w")

    def _entry(self, var, show=None):
        entry = tk.Entry(self._body, textvariable=var, font=(_FONT, 12), show=show,
                         bg=THEME["bg_input"], fg=THEME["text_primary"],
                         insertbackground=THEME["text_primary"],
                         relief="solid", borderwidth=1,
                         highlightbackground=THEME["border"],
                         highlightcolor=THEME["primary"])
        entry.pack(fill="x", pady=(4, 14))
        return entry

    def _button(self, text, command, color=None):
        btn = tk.Button(self._body, text=text, font=(_FONT, 12, "bold"),
                        bg=color or THEME["primary"], fg="white",
                        activebackground=THEME["primary_hover"], activeforeground="white",
                        relief="flat", padx=20, pady=8, cursor="hand2", command=command)
        btn.pack(fill="x", pady=(0, 10))
        return btn

    def _show_outcome(self, outcome):
        self._busy = False
        color = THEME["success"] if outcome.ok else THEME["error"]
        self._set_status(outcome.message, color)

    # ─── Login ───────────────────────────────────────────────

    def _show_login(self, keep_session=False):
        saved_url, saved_badge = self._auth.begin_login(keep_session=keep_session)
        self._pipeline = None
        self._clear_body()

        url_var = tk.StringVar(value=saved_url or self._config.get("serverUrl", DEFAULT_SERVER_URL))
        badge_var = tk.StringVar(value=saved_badge or "")
        password_var = tk.StringVar()

        self._label("Server URL")
        self._entry(url_var)
        self._label("Badge Number")
        self._entry(badge_var)
        self._label("Password")
        self._entry(password_var, show="•")

        def on_login():
            badge = badge_var.get().strip()
            if not badge or not password_var.get():
                self._set_status("Badge number and password are required.", THEME["error"])
                return
            credentials = Credentials(badge, password_var.get())
            password_var.set("")
            self._run_async(
                lambda: self._auth.submit_credentials(credentials, url_var.get()),
                self._on_login_done,
            )

        self._button("Login", on_login)

    def _on_login_done(self, outcome):
        self._show_outcome(outcome)
        if isinstance(outcome, OtpRequired):
            self._show_otp()

    # ─── OTP ─────────────────────────────────────────────────

    def _show_otp(self):
        self._clear_body()
        self._label("Enter Verification Code", size=14)
        self._label("Please enter the 6-digit code sent to your device.",
                    size=10, bold=False, color=THEME["text_muted"])
        self._label(f"Badge: {self._auth.pending_badge}", size=10, bold=False,
                    color=THEME["text_muted"])

        code_var = tk.StringVar()
        self._entry(code_var)
        verify_btn = self._button("Verify Code", lambda: on_verify())
        verify_btn.config(state="disabled")

        def on_change(*_):
            normalized = normalize_otp(code_var.get())
            if normalized != code_var.get():
                code_var.set(normalized)
                return
            verify_btn.config(state="normal" if OtpChallenge.is_submittable(normalized) else "disabled")

        code_var.trace_add("write", on_change)

        def on_verify():
            if not OtpChallenge.is_submittable(code_var.get()):
                return
            challenge = OtpChallenge.from_input(code_var.get())
            self._run_async(lambda: self._auth.submit_code(challenge), self._on_otp_done)

        self._button("Back to Login", lambda: self._navigate(self._show_login),
                     color=THEME["bg_card"])

    def _on_otp_done(self, outcome):
        self._show_outcome(outcome)
        if isinstance(outcome, Authenticated):
            self._pipeline = AttendanceGuardPipeline(
                self._auth.client, self._location, self._vpn_probe, self._verifier,
                outcome.profile.badge_number,
            )
            self._show_dashboard()
        elif isinstance(outcome, SessionExpired):
            self._return_to_login(outcome)

    # ─── Dashboard ───────────────────────────────────────────

    def _show_dashboard(self):
        profile = self._auth.profile
        self._clear_body()
        self._label(f"Welcome, {profile.display_name}!", size=15)
        self._label(f"Badge: {profile.badge_number}", size=10, bold=False,
                    color=THEME["text_muted"])
        tk.Frame(self._body, bg=THEME["bg_darkest"], height=14).pack()

        self._button("Check-in", lambda: self._submit(AttendanceAction.CHECK_IN),
                     color=THEME["success"])
        self._button("Check-out", lambda: self._submit(AttendanceAction.CHECK_OUT),
                     color=THEME["checkout"])
        self._button("View Timesheet", self._open_timesheet)
        self._button("Logout", self._logout, color=THEME["error"])

    def _submit(self, action):
        if self._location.latest() is None:
            self._set_status("Location not available. Enable location to "
                             f"{action.value.lower()}.", THEME["warning"])
            return
        self._run_async(lambda: self._pipeline.submit(action), self._on_attendance_done)

    def _on_attendance_done(self, outcome):
        self._show_outcome(outcome)
        if self._auth.state is AuthState.SESSION_EXPIRED:
            self._return_to_login(outcome)

    def _open_timesheet(self):
        self._run_async(lambda: fetch_timesheet(self._auth.client), self._on_timesheet_done)

    def _on_timesheet_done(self, outcome):
        self._show_outcome(outcome)
        if isinstance(outcome, TimesheetLoaded):
            self._show_timesheet(outcome.entries)
        elif self._auth.state is AuthState.SESSION_EXPIRED:
            self._return_to_login(outcome)

    def _show_timesheet(self, entries):
        self._clear_body()
        self._label("Timesheet", size=14)
        listing = tk.Text(self._body, height=14, font=(_FONT, 10), relief="flat",
                          bg=THEME["bg_card"], fg=THEME["text_primary"])
        for entry in entries:
            listing.insert("end", f"{format_date(entry.day_date)}\n")
            listing.insert("end", f"  In: {format_time(entry.check_in)}   "
                                  f"Out: {format_time(entry.check_out)}\n")
            listing.insert("end", f"  Duration: {format_duration(entry.total_minutes)}\n\n")
        if not entries:
            listing.insert("end", "No records.")
        listing.config(state="disabled")
        listing.pack(fill="both", expand=True, pady=(6, 10))
        self._button("Back", lambda: self._navigate(self._show_dashboard))

    # ─── Logout / expiry ─────────────────────────────────────

    def _logout(self):
        self._run_async(self._auth.logout, self._on_logout_done)

    def _on_logout_done(self, outcome):
        self._show_outcome(outcome)
        if isinstance(outcome, LoggedOut):
            self._show_login()
            self._set_status(outcome.message, THEME["success"])

    def _return_to_login(self, outcome):
        self._show_login()
        self._set_status(outcome.message, THEME["warning"])
