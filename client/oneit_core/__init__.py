"""
oneit_core: oneIT Attendance Client v1.2
========================================
Architecture: blocking controllers on worker threads, Tkinter main loop
for presentation, one SessionStore shared by every backend call.

  constants.py      → Version, endpoints, messages, VPN patterns, theme
  config.py         → Paths, logging, settings, JsonStore, Preferences
  session.py        → SessionStore + Set-Cookie token extraction
  http_client.py    → HTTP session (pooling/SSL) + BackendClient
  models.py         → Credentials, OTP, profile, fixes, attendance request
  outcomes.py       → Outcome values returned by every operation
  classifier.py     → classify(): HTTP result → Outcome
  state.py          → AuthState + allowed transitions
  auth.py           → AuthFlowController (login → OTP → session → logout)
  guards.py         → Guard chain driver
  pipeline.py       → AttendanceGuardPipeline (location → VPN → biometric → POST)
  platform_probe.py → VPN interface scan, owner verifiers
  location.py       → LocationProvider (latest fix)
  timesheet.py      → Timesheet fetch + formatting
  app.py            → ClientApp (Tk screens, worker dispatch)
  runner.py         → main() composition root
"""
