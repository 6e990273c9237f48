"""Emulated wallet page where the user accepts or rejects a request."""

from __future__ import annotations

import html
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import HTMLResponse

from pylon_emulator.services.sessions import VerificationNotFound

if TYPE_CHECKING:
    from pylon_emulator.containers import AppContainer

router = APIRouter(tags=["wallet"])


@router.get("/scan/{verification_id}", response_class=HTMLResponse)
async def wallet_ui(verification_id: str, request: Request) -> HTMLResponse:
    """Render the consent screen, or a resolved notice once the session is final."""
    container: AppContainer = request.app.state.container
    try:
        session = await container.verification_service.get_verification(
            verification_id
        )
    except VerificationNotFound as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)
        ) from exc
    if session.status.is_terminal:
        message = f"This verification is already {session.status.value}."
        disabled = " disabled"
    else:
        message = f"Verify that you are at least {session.min_age} years old?"
        disabled = ""
    page = (
        _WALLET_UI_HTML.replace("__VERIFICATION_ID__", html.escape(session.id))
        .replace("__MESSAGE__", message)
        .replace("__DISABLED__", disabled)
        .replace("__STATUS__", session.status.value)
    )
    return HTMLResponse(page)


_WALLET_UI_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <title>Pylon Wallet</title>
    <style>
      body {
        font-family: ui-sans-serif, system-ui, sans-serif;
        display: flex; justify-content: center; align-items: center;
        height: 100vh; margin: 0;
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
      }
      .wallet {
        background: white; border-radius: 12px; padding: 40px;
        box-shadow: 0 20px 60px rgba(0,0,0,0.3); text-align: center;
        max-width: 400px;
      }
      .buttons { display: flex; gap: 10px; }
      button {
        flex: 1; padding: 12px 20px; border: none; border-radius: 8px;
        font-size: 16px; font-weight: 600; color: white; cursor: pointer;
      }
      .accept { background: rgb(16, 185, 129); }
      .reject { background: rgb(239, 68, 68); }
      .success { color: rgb(16, 185, 129); }
    </style>
  </head>
  <body>
    <div class="wallet" data-status="__STATUS__">
      <h1>Age Verification</h1>
      <p id="message">__MESSAGE__</p>
      <div class="buttons">
        <button class="accept" onclick="respond('accept')"__DISABLED__>Accept</button>
        <button class="reject" onclick="respond('reject')"__DISABLED__>Reject</button>
      </div>
    </div>
    <script>
      const verificationId = "__VERIFICATION_ID__";
      async function respond(action) {
        const message = document.getElementById('message');
        document.querySelectorAll('button').forEach(b => b.disabled = true);
        message.textContent = 'Processing... Please wait';
        const res = await fetch(`/webhook/${action}/${verificationId}`, {
          method: 'POST'
        });
        if (!res.ok) {
          message.textContent = 'Error: ' + res.status;
          return;
        }
        message.textContent = action === 'accept'
          ? 'Verified! Webhook sent.'
          : 'You rejected the verification.';
        message.className = 'success';
      }
    </script>
  </body>
</html>
"""
