"""FastAPI server that exposes the candidate page and its JSON endpoints.

The page only renders what ``GET /state`` returns and forwards user actions
and integrity signals. Countdowns, scoring and every state transition run
server-side on the event loop that serves these handlers.
"""

from __future__ import annotations

from dataclasses import asdict
from threading import Thread
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import HTMLResponse
from pydantic import BaseModel
import uvicorn

from proctor_app.constants.about import APP_NAME, APP_VERSION
from proctor_app.constants.network_constants import (
    CLIENT_COOKIE,
    CLIENT_COOKIE_MAX_AGE_S,
    DEFAULT_HOST,
    DEFAULT_PORT,
)
from proctor_app.core.integrity_monitor import Consequence, KeyChord, SignalOutcome
from proctor_app.core.models import CandidateInfo, SignalType
from proctor_app.core.session_engine import EngineSnapshot
from proctor_app.core.session_manager import SessionManager

_KEYDOWN_SIGNAL = "keydown"


def _ensure_client(request: Request, response: Response, manager: SessionManager) -> str:
    client_id = request.cookies.get(CLIENT_COOKIE)
    if client_id:
        return client_id
    client_id = manager.new_client_id()
    response.set_cookie(
        key=CLIENT_COOKIE,
        value=client_id,
        max_age=CLIENT_COOKIE_MAX_AGE_S,
        samesite="lax",
        httponly=True,
    )
    return client_id


_CANDIDATE_PAGE_HTML = """<!doctype html>
<html lang="en">
  <head>
    <meta charset="utf-8" />
    <title>ProctorQt Assessment</title>
    <meta name="viewport" content="width=device-width, initial-scale=1" />
    <style>
      :root { font-family: 'Inter', system-ui, sans-serif; background: #0b1120; color: #f5f7ff; }
      body { margin: 0; padding: 1.5rem; display: flex; flex-direction: column; gap: 1rem; max-width: 60rem; margin-inline: auto; }
      .card { background: #111a30; border-radius: 0.75rem; padding: 1.5rem; box-shadow: 0 0.5rem 1.5rem rgba(0, 0, 0, 0.4); }
      .hidden { display: none !important; }
      .primary-button { border: none; border-radius: 0.75rem; padding: 0.85rem 1.5rem; font-size: 1rem; background: #1f9aa5; color: #fff; cursor: pointer; transition: transform 120ms ease, background 120ms ease; }
      .primary-button:hover { transform: translateY(-2px); background: #16808a; }
      .primary-button:disabled { opacity: 0.6; cursor: not-allowed; transform: none; }
      label { display: block; font-size: 0.9rem; color: #94a3b8; margin-top: 0.75rem; }
      input, select { width: 100%; box-sizing: border-box; padding: 0.6rem; border-radius: 0.5rem; border: 1px solid #334155; background: #0f172a; color: #f5f7ff; font-size: 1rem; }
      .form-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(220px, 1fr)); gap: 0 1rem; }
      .error { color: #f87171; min-height: 1.25rem; }
      .banner { background: #7c2d12; color: #fed7aa; border-radius: 0.75rem; padding: 0.85rem 1.25rem; }
      #question-container { min-height: 6rem; font-size: 1.1rem; line-height: 1.6; }
      .progress { color: #94a3b8; font-size: 0.95rem; }
      .options-grid { display: grid; grid-template-columns: repeat(auto-fit, minmax(180px, 1fr)); gap: 0.75rem; margin: 1rem 0; }
      .option-button { border: 2px solid transparent; border-radius: 0.75rem; padding: 1rem; font-size: 1rem; background: #1e293b; color: #fff; cursor: pointer; text-align: left; }
      .option-button.selected { border-color: #1f9aa5; background: #134e4a; }
      .timer-row { display: flex; flex-direction: column; gap: 0.35rem; margin-bottom: 1rem; }
      .timer-label { font-size: 0.95rem; color: #facc15; }
      .timer-label.critical { color: #f87171; }
      .timer-track { width: 100%; height: 0.6rem; background: rgba(250, 204, 21, 0.25); border-radius: 999px; overflow: hidden; }
      .timer-fill { height: 100%; background: #facc15; transform-origin: left center; transition: transform 300ms linear; }
      .board { display: grid; grid-template-columns: 1fr 1fr; gap: 1rem; }
      .board-group h3 { margin: 0.25rem 0 0.5rem; color: #94a3b8; font-size: 0.95rem; }
      .bucket { min-height: 6rem; border: 2px dashed #334155; border-radius: 0.75rem; padding: 0.5rem; margin-bottom: 0.75rem; cursor: pointer; }
      .bucket h4 { margin: 0 0 0.5rem; }
      .chips { display: flex; flex-wrap: wrap; gap: 0.5rem; }
      .chip { background: #1e293b; border: 2px solid transparent; border-radius: 999px; padding: 0.4rem 0.8rem; cursor: pointer; user-select: none; }
      .chip.picked { border-color: #facc15; }
      .chip.correct { background: #14532d; }
      .chip.incorrect { background: #7f1d1d; }
      .score { font-size: 2.5rem; font-weight: 700; }
    </style>
  </head>
  <body>
    <div id="warning-banner" class="banner hidden">
      Warning: you left the test page. A second tab switch will cancel your test.
    </div>

    <section class="card hidden" id="codes-card">
      <h1>Assessment Login</h1>
      <label for="quiz-code">Quiz access code</label>
      <input id="quiz-code" autocomplete="off" />
      <label for="candidate-code">Candidate code</label>
      <input id="candidate-code" autocomplete="off" />
      <p class="error" id="codes-error"></p>
      <button id="verify-button" class="primary-button">Continue</button>
    </section>

    <section class="card hidden" id="identity-card">
      <h2 id="identity-title">Confirm your details</h2>
      <div class="form-grid">
        <div><label for="first_name">First name</label><input id="first_name" /></div>
        <div><label for="last_name">Last name</label><input id="last_name" /></div>
        <div><label for="email">Email</label><input id="email" type="email" /></div>
        <div><label for="manager">Manager</label><input id="manager" /></div>
        <div><label for="department">Department</label><input id="department" /></div>
        <div><label for="level">Level</label>
          <select id="level"><option value="C1">C1</option><option value="C2">C2</option><option value="C3">C3</option></select>
        </div>
        <div><label for="role">Role</label><input id="role" /></div>
      </div>
      <p class="error" id="identity-error"></p>
      <button id="login-button" class="primary-button">Start the test</button>
    </section>

    <section class="card hidden" id="quiz-card">
      <p class="progress" id="progress"></p>
      <div class="timer-row">
        <span class="timer-label" id="question-timer-label"></span>
        <div class="timer-track"><div class="timer-fill" id="question-timer-fill"></div></div>
      </div>
      <div id="question-container"></div>
      <div id="options-container" class="options-grid"></div>
      <p class="error" id="quiz-error"></p>
      <button id="next-button" class="primary-button" disabled>Next</button>
    </section>

    <section class="card hidden" id="classification-card">
      <h2>Classify each term</h2>
      <p class="progress">Pick a term, then click the category it belongs to. Click a placed term to send it back.</p>
      <span class="timer-label" id="classification-timer-label"></span>
      <h3>Unclassified</h3>
      <div class="chips" id="unassigned"></div>
      <div class="board" id="board"></div>
      <p class="error" id="classification-error"></p>
      <p id="classification-feedback"></p>
      <button id="validate-button" class="primary-button" disabled>Validate</button>
    </section>

    <section class="card hidden" id="completed-card">
      <h2>Test completed</h2>
      <p>Thank you. Your answers have been recorded.</p>
      <p>Quiz score: <span class="score" id="final-score"></span></p>
      <p id="final-classification"></p>
      <button class="primary-button restart-button">Start a new test</button>
    </section>

    <section class="card hidden" id="cancelled-card">
      <h2>Test cancelled</h2>
      <p>Your test was cancelled after switching tabs twice. Please contact your manager.</p>
      <button class="primary-button restart-button">Back to login</button>
    </section>

    <script>
      const cards = {
        codes: document.getElementById('codes-card'),
        identity: document.getElementById('identity-card'),
        quiz: document.getElementById('quiz-card'),
        classification: document.getElementById('classification-card'),
        completed: document.getElementById('completed-card'),
        cancelled: document.getElementById('cancelled-card'),
      };
      const identityFields = ['first_name', 'last_name', 'email', 'manager', 'department', 'level', 'role'];
      const warningBanner = document.getElementById('warning-banner');
      const questionContainer = document.getElementById('question-container');
      const optionsContainer = document.getElementById('options-container');
      const nextButton = document.getElementById('next-button');
      const validateButton = document.getElementById('validate-button');

      let state = null;
      let pendingCodes = null;
      let pickedTerm = null;
      let renderedQuestion = null;

      function setVisibility(element, isVisible) {
        if (!element) return;
        element.classList.toggle('hidden', !isVisible);
      }

      function showCard(name) {
        Object.entries(cards).forEach(([key, card]) => setVisibility(card, key === name));
      }

      async function api(path, body) {
        const options = body === undefined
          ? { credentials: 'same-origin' }
          : { method: 'POST', credentials: 'same-origin', headers: { 'Content-Type': 'application/json' }, body: JSON.stringify(body) };
        const response = await fetch(path, options);
        const data = await response.json().catch(() => ({}));
        if (!response.ok) {
          const detail = typeof data.detail === 'string' ? data.detail : 'Request failed.';
          throw new Error(detail);
        }
        return data;
      }

      function formatSeconds(seconds) {
        const minutes = Math.floor(seconds / 60);
        const rest = String(seconds % 60).padStart(2, '0');
        return `${minutes}:${rest}`;
      }

      function renderTimer(label, fill, remaining, total) {
        label.textContent = `${formatSeconds(remaining)} remaining`;
        label.classList.toggle('critical', remaining <= 10);
        if (fill) {
          const fraction = total <= 0 ? 0 : Math.min(1, remaining / total);
          fill.style.transform = `scaleX(${fraction})`;
        }
      }

      function renderQuestion(question) {
        document.getElementById('progress').textContent = `Question ${question.index + 1} of ${question.count}`;
        renderTimer(
          document.getElementById('question-timer-label'),
          document.getElementById('question-timer-fill'),
          question.time_remaining,
          question.time_budget,
        );
        if (renderedQuestion !== question.index) {
          renderedQuestion = question.index;
          questionContainer.innerHTML = question.prompt_html;
          document.getElementById('quiz-error').textContent = '';
          optionsContainer.innerHTML = '';
          question.choices.forEach((choice, index) => {
            const button = document.createElement('button');
            button.className = 'option-button';
            button.textContent = choice;
            button.addEventListener('click', () => selectChoice(index));
            optionsContainer.appendChild(button);
          });
        }
        Array.from(optionsContainer.children).forEach((button, index) => {
          button.classList.toggle('selected', question.selected === index);
        });
        nextButton.textContent = question.is_last ? 'Finish' : 'Next';
        nextButton.disabled = question.selected === null;
      }

      function chip(term, onClick) {
        const element = document.createElement('span');
        element.className = 'chip';
        element.textContent = term.term;
        if (term.correct === true) element.classList.add('correct');
        if (term.correct === false) element.classList.add('incorrect');
        if (pickedTerm === term.id) element.classList.add('picked');
        element.addEventListener('click', (event) => {
          event.stopPropagation();
          onClick(term);
        });
        return element;
      }

      function renderClassification(view) {
        renderTimer(document.getElementById('classification-timer-label'), null, view.time_remaining, 1);
        const unassigned = document.getElementById('unassigned');
        unassigned.innerHTML = '';
        view.unassigned.forEach((term) => {
          unassigned.appendChild(chip(term, () => {
            if (view.validated) return;
            pickedTerm = pickedTerm === term.id ? null : term.id;
            renderClassification(view);
          }));
        });
        const board = document.getElementById('board');
        board.innerHTML = '';
        Object.entries(view.groups).forEach(([groupName, categories]) => {
          const group = document.createElement('div');
          group.className = 'board-group';
          const heading = document.createElement('h3');
          heading.textContent = groupName;
          group.appendChild(heading);
          categories.forEach((category) => {
            const bucket = document.createElement('div');
            bucket.className = 'bucket';
            const title = document.createElement('h4');
            title.textContent = view.labels[category];
            bucket.appendChild(title);
            const chips = document.createElement('div');
            chips.className = 'chips';
            view.board[category].forEach((term) => {
              chips.appendChild(chip(term, () => assignTerm(term.id, null, view)));
            });
            bucket.appendChild(chips);
            bucket.addEventListener('click', () => {
              if (pickedTerm) assignTerm(pickedTerm, category, view);
            });
            group.appendChild(bucket);
          });
          board.appendChild(group);
        });
        validateButton.disabled = !view.can_validate;
        const feedback = document.getElementById('classification-feedback');
        feedback.textContent = view.validated
          ? `Score: ${view.score}% (continuing in ${view.feedback_remaining}s)`
          : '';
      }

      function render(next) {
        state = next;
        setVisibility(warningBanner, state.warning_banner && (state.phase === 'in_progress' || state.phase === 'classification_game'));
        if (state.phase === 'login') {
          renderedQuestion = null;
          showCard(pendingCodes ? 'identity' : 'codes');
        } else if (state.phase === 'in_progress') {
          showCard('quiz');
          renderQuestion(state.question);
        } else if (state.phase === 'classification_game') {
          showCard('classification');
          renderClassification(state.classification);
        } else if (state.phase === 'completed') {
          showCard('completed');
          document.getElementById('final-score').textContent = `${state.score ?? 0}%`;
          document.getElementById('final-classification').textContent =
            state.classification_score === null ? '' : `Classification score: ${state.classification_score}%`;
        } else if (state.phase === 'cancelled') {
          showCard('cancelled');
        }
      }

      async function refresh() {
        try {
          render(await api('/state'));
        } catch (error) {
          console.warn('State refresh failed', error);
        }
      }

      async function selectChoice(index) {
        try {
          render(await api('/select', { choice: index }));
        } catch (error) {
          document.getElementById('quiz-error').textContent = error.message;
        }
      }

      async function assignTerm(termId, category, view) {
        if (view.validated) return;
        pickedTerm = null;
        try {
          render(await api('/classification/assign', { term_id: termId, category }));
        } catch (error) {
          document.getElementById('classification-error').textContent = error.message;
        }
      }

      document.getElementById('verify-button').addEventListener('click', async () => {
        const codes = {
          quiz_code: document.getElementById('quiz-code').value,
          candidate_code: document.getElementById('candidate-code').value,
        };
        try {
          const verified = await api('/verify', codes);
          pendingCodes = codes;
          document.getElementById('codes-error').textContent = '';
          document.getElementById('identity-title').textContent = `Confirm your details for ${verified.quiz_name}`;
          identityFields.forEach((field) => {
            document.getElementById(field).value = verified.identity[field] || '';
          });
          showCard('identity');
        } catch (error) {
          document.getElementById('codes-error').textContent = error.message;
        }
      });

      document.getElementById('login-button').addEventListener('click', async () => {
        const identity = {};
        identityFields.forEach((field) => { identity[field] = document.getElementById(field).value; });
        try {
          const next = await api('/login', { ...pendingCodes, identity });
          pendingCodes = null;
          document.getElementById('identity-error').textContent = '';
          render(next);
        } catch (error) {
          document.getElementById('identity-error').textContent = error.message;
        }
      });

      nextButton.addEventListener('click', async () => {
        if (!state || !state.question) return;
        nextButton.disabled = true;
        try {
          const result = await api('/next', { question_index: state.question.index });
          render(result.state);
        } catch (error) {
          document.getElementById('quiz-error').textContent = error.message;
        }
      });

      validateButton.addEventListener('click', async () => {
        try {
          render(await api('/classification/validate', {}));
        } catch (error) {
          document.getElementById('classification-error').textContent = error.message;
        }
      });

      document.querySelectorAll('.restart-button').forEach((button) => {
        button.addEventListener('click', async () => {
          pendingCodes = null;
          render(await api('/restart', {}));
        });
      });

      async function report(signal) {
        if (!state || (state.phase !== 'in_progress' && state.phase !== 'classification_game')) return;
        try {
          const outcome = await api('/signal', signal);
          if (outcome.recorded && (outcome.warning || outcome.cancelled)) refresh();
        } catch (error) {
          console.warn('Signal report failed', error);
        }
      }

      function isDevtoolsShortcut(event) {
        const key = (event.key || '').toUpperCase();
        const command = event.ctrlKey || event.metaKey;
        if (key === 'F12') return true;
        if (command && event.shiftKey && ['I', 'C', 'J'].includes(key)) return true;
        if (event.metaKey && event.altKey && ['I', 'C', 'J'].includes(key)) return true;
        return command && !event.shiftKey && key === 'U';
      }

      document.addEventListener('visibilitychange', () => {
        if (document.hidden) report({ type: 'tab_switch' });
      });
      window.addEventListener('blur', () => report({ type: 'window_blur' }));
      window.addEventListener('focus', () => report({ type: 'focus_regained' }));
      document.addEventListener('contextmenu', (event) => {
        event.preventDefault();
        report({ type: 'right_click', target: event.target ? event.target.tagName : null });
      });
      document.addEventListener('keydown', (event) => {
        if (!isDevtoolsShortcut(event)) return;
        event.preventDefault();
        report({
          type: 'keydown',
          key: event.key,
          ctrl: event.ctrlKey,
          shift: event.shiftKey,
          alt: event.altKey,
          meta: event.metaKey,
        });
      });

      refresh();
      setInterval(refresh, 1000);
    </script>
  </body>
</html>
"""


class CodesPayload(BaseModel):
    """Payload schema for the access-code step."""

    quiz_code: str
    candidate_code: str


class IdentityPayload(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    manager: str = ""
    department: str = ""
    level: str = ""
    role: str = ""


class LoginPayload(CodesPayload):
    identity: IdentityPayload


class SelectPayload(BaseModel):
    choice: int


class NextPayload(BaseModel):
    question_index: int | None = None


class SignalPayload(BaseModel):
    """Integrity signal forwarded by the candidate page."""

    type: str
    key: str | None = None
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False
    target: str | None = None


class AssignPayload(BaseModel):
    term_id: str
    category: str | None = None


def _get_session_manager_dependency(session_manager: SessionManager):
    def dependency() -> SessionManager:
        return session_manager

    return dependency


def snapshot_to_dict(snapshot: EngineSnapshot) -> dict[str, Any]:
    payload = asdict(snapshot)
    payload["phase"] = snapshot.phase.value
    return payload


def _outcome_to_dict(outcome: SignalOutcome) -> dict[str, Any]:
    return {
        "recorded": outcome.recorded,
        "suppress": outcome.suppress,
        "warning": outcome.consequence is Consequence.WARN,
        "cancelled": outcome.consequence is Consequence.CANCEL,
    }


def create_api_app(session_manager: SessionManager) -> FastAPI:
    """Create a FastAPI application wired to the provided session manager."""
    app = FastAPI(title=f"{APP_NAME} API", version=APP_VERSION)
    manager_dep = _get_session_manager_dependency(session_manager)

    @app.get("/", response_class=HTMLResponse)
    async def serve_candidate_page() -> str:
        return _CANDIDATE_PAGE_HTML

    @app.get("/state")
    async def get_state(
        request: Request,
        response: Response,
        manager: SessionManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        client_id = _ensure_client(request, response, manager)
        return snapshot_to_dict(manager.snapshot(client_id))

    @app.post("/verify")
    async def verify_codes(
        payload: CodesPayload,
        request: Request,
        response: Response,
        manager: SessionManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        client_id = _ensure_client(request, response, manager)
        try:
            quiz, candidate = manager.verify_access_codes(client_id, payload.quiz_code, payload.candidate_code)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return {
            "quiz_name": quiz.name,
            "quiz_description": quiz.description,
            "has_classification_game": quiz.has_classification_game,
            "question_count": len(quiz.question_ids),
            "identity": candidate.info.to_dict(),
        }

    @app.post("/login", status_code=201)
    async def login(
        payload: LoginPayload,
        request: Request,
        response: Response,
        manager: SessionManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        client_id = _ensure_client(request, response, manager)
        identity = CandidateInfo(**payload.identity.model_dump())
        try:
            manager.login(client_id, payload.quiz_code, payload.candidate_code, identity)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return snapshot_to_dict(manager.snapshot(client_id))

    @app.post("/select")
    async def select_answer(
        payload: SelectPayload,
        request: Request,
        response: Response,
        manager: SessionManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        client_id = _ensure_client(request, response, manager)
        try:
            manager.select_answer(client_id, payload.choice)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return snapshot_to_dict(manager.snapshot(client_id))

    @app.post("/next")
    async def next_question(
        payload: NextPayload,
        request: Request,
        response: Response,
        manager: SessionManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        client_id = _ensure_client(request, response, manager)
        try:
            advanced = manager.next_question(client_id, payload.question_index)
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return {"advanced": advanced, "state": snapshot_to_dict(manager.snapshot(client_id))}

    @app.post("/signal")
    async def report_signal(
        payload: SignalPayload,
        request: Request,
        response: Response,
        manager: SessionManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        client_id = _ensure_client(request, response, manager)
        if payload.type == _KEYDOWN_SIGNAL:
            chord = KeyChord(
                key=payload.key or "",
                ctrl=payload.ctrl,
                shift=payload.shift,
                alt=payload.alt,
                meta=payload.meta,
            )
            outcome = manager.handle_key(client_id, chord)
        else:
            try:
                signal = SignalType(payload.type)
            except ValueError as exc:
                raise HTTPException(status_code=422, detail=f"Unknown signal '{payload.type}'.") from exc
            metadata = {"target": payload.target} if payload.target else None
            outcome = manager.handle_signal(client_id, signal, metadata)
        return _outcome_to_dict(outcome)

    @app.post("/classification/assign")
    async def assign_term(
        payload: AssignPayload,
        request: Request,
        response: Response,
        manager: SessionManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        client_id = _ensure_client(request, response, manager)
        try:
            manager.assign_term(client_id, payload.term_id, payload.category)
        except ValueError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return snapshot_to_dict(manager.snapshot(client_id))

    @app.post("/classification/validate")
    async def validate_classification(
        request: Request,
        response: Response,
        manager: SessionManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        client_id = _ensure_client(request, response, manager)
        try:
            manager.validate_classification(client_id)
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return snapshot_to_dict(manager.snapshot(client_id))

    @app.post("/restart")
    async def restart(
        request: Request,
        response: Response,
        manager: SessionManager = Depends(manager_dep),
    ) -> dict[str, Any]:
        client_id = _ensure_client(request, response, manager)
        try:
            manager.start_new_attempt(client_id)
        except RuntimeError as exc:
            raise HTTPException(status_code=409, detail=str(exc)) from exc
        return snapshot_to_dict(manager.snapshot(client_id))

    return app


def start_api_server(
    session_manager: SessionManager,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""

    app = create_api_app(session_manager)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="ProctorApiServer", daemon=True)
    thread.start()
    return thread
