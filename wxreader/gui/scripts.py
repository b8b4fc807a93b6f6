"""JavaScript injected into the reader page.

``window.__wxrd`` hands out integer handles for elements so the Python side
can refer to the same node across calls, and exposes the small set of DOM
reads and writes the engine needs. The hooks forward key presses, trusted
pointer presses and panel mutations to the ``wxrdBridge`` WebChannel object.
"""

from __future__ import annotations

import json
from string import Template
from typing import Iterable

from wxreader.engine import selectors

BRIDGE_NAME = "wxrdBridge"
RUNTIME_NAMESPACE = "__wxrd"

_BOOTSTRAP = Template(
    r"""
(() => {
  if (window.$namespace) return;

  const CODES = new Set($codes);
  const SCROLLABLE = new Set(["auto", "scroll"]);
  const EDITABLE = $editable;
  const nodes = new Map();
  const ids = new WeakMap();
  let nextId = 1;
  let bridge = null;
  let watched = null;
  let styleObserver = null;
  let panelsPending = false;

  const connect = () => {
    if (bridge || !(window.qt && window.qt.webChannelTransport)) return;
    if (typeof QWebChannel === "undefined") return;
    try {
      new QWebChannel(window.qt.webChannelTransport, (channel) => {
        bridge = channel.objects.$bridge || null;
      });
    } catch (e) {
      bridge = null;
    }
  };
  const notify = (name, ...args) => {
    connect();
    if (bridge && typeof bridge[name] === "function") bridge[name](...args);
  };

  const prune = () => {
    if (nodes.size < 4000) return;
    for (const [id, el] of nodes) {
      if (!el.isConnected) {
        nodes.delete(id);
      }
    }
  };
  const handle = (el) => {
    if (!el) return null;
    let id = ids.get(el);
    if (!id) {
      prune();
      id = nextId++;
      ids.set(el, id);
    }
    nodes.set(id, el);
    return id;
  };
  const node = (id) => {
    const el = nodes.get(id);
    return el && el.isConnected ? el : null;
  };
  const root = (scopeId) => (scopeId == null ? document : node(scopeId));
  const selectAll = (scope, selector) => {
    if (!scope) return [];
    try {
      return Array.from(scope.querySelectorAll(selector));
    } catch (e) {
      return [];
    }
  };
  const rectOf = (el) => {
    const r = el.getBoundingClientRect();
    return { left: r.left, top: r.top, width: r.width, height: r.height };
  };
  const visible = (el) => {
    const style = window.getComputedStyle(el);
    if (style.display === "none" || style.visibility === "hidden" || style.opacity === "0") {
      return false;
    }
    const r = el.getBoundingClientRect();
    return r.width > 0 && r.height > 0;
  };
  const identityKey = (el, attrs, nameParts, depth) => {
    let current = el;
    for (let level = 0; current && level < depth; level++) {
      for (const name of attrs) {
        const value = current.getAttribute(name);
        if (value) return name + ":" + value;
      }
      for (const name of current.getAttributeNames()) {
        if (!nameParts.some((part) => name.includes(part))) continue;
        const value = current.getAttribute(name);
        if (value) return name + ":" + value;
      }
      current = current.parentElement;
    }
    return null;
  };
  const scrollParent = (el) => {
    let current = el.parentElement;
    while (current) {
      const s = window.getComputedStyle(current);
      if (SCROLLABLE.has(s.overflow) || SCROLLABLE.has(s.overflowY)) return current;
      current = current.parentElement;
    }
    return null;
  };
  const onScreen = (el) => {
    const r = el.getBoundingClientRect();
    if (!(r.width > 0 && r.height > 0)) return false;
    const container = scrollParent(el);
    if (container) {
      const b = container.getBoundingClientRect();
      if (r.bottom < b.top || r.top > b.bottom) return false;
    }
    const height = window.innerHeight || document.documentElement.clientHeight;
    return r.top < height && r.bottom > 0;
  };
  const withNode = (id, fn, fallback = null) => {
    const el = node(id);
    if (!el) return fallback;
    try {
      return fn(el);
    } catch (e) {
      return fallback;
    }
  };

  const api = {
    queryAll: (selector, scopeId) => selectAll(root(scopeId), selector).map(handle),
    query: (selector, scopeId) => {
      const scope = root(scopeId);
      if (!scope) return null;
      try {
        return handle(scope.querySelector(selector));
      } catch (e) {
        return null;
      }
    },
    highlightFragments: (selector, attrs, nameParts, depth, colorPrefix) =>
      selectAll(document, selector).filter(visible).map((el) => ({
        handle: handle(el),
        rect: rectOf(el),
        key: identityKey(el, attrs, nameParts, depth),
        color: Array.from(el.classList).find((name) => name.startsWith(colorPrefix)) || "",
      })),
    onScreen: (ids) => ids.map((id) => withNode(id, onScreen, false)),
    rect: (id) => withNode(id, rectOf),
    classes: (id) => withNode(id, (el) => Array.from(el.classList), []),
    attribute: (id, name) => withNode(id, (el) => el.getAttribute(name)),
    attributeNames: (id) => withNode(id, (el) => el.getAttributeNames(), []),
    setAttribute: (id, name, value) => withNode(id, (el) => { el.setAttribute(name, value); return true; }, false),
    parent: (id) => withNode(id, (el) => handle(el.parentElement)),
    style: (id) => withNode(id, (el) => {
      const s = window.getComputedStyle(el);
      return {
        display: s.display,
        visibility: s.visibility,
        opacity: s.opacity,
        overflow: s.overflow,
        overflowY: s.overflowY,
      };
    }, {}),
    text: (id) => withNode(id, (el) => el.innerText || "", ""),
    addClass: (id, name) => withNode(id, (el) => { el.classList.add(name); return true; }, false),
    removeClass: (id, name) => withNode(id, (el) => { el.classList.remove(name); return true; }, false),
    scrollIntoView: (id) => withNode(id, (el) => {
      el.scrollIntoView({ block: "center", inline: "center", behavior: "auto" });
      return true;
    }, false),
    dispatch: (id, types) => withNode(id, (el) => {
      const r = el.getBoundingClientRect();
      const base = {
        bubbles: true,
        cancelable: true,
        view: window,
        clientX: r.left + r.width / 2,
        clientY: r.top + r.height / 2,
        button: 0,
        buttons: 1,
      };
      for (const type of types) {
        const event = type.startsWith("pointer")
          ? new PointerEvent(type, Object.assign({ pointerId: 1, pointerType: "mouse", isPrimary: true }, base))
          : new MouseEvent(type, base);
        el.dispatchEvent(event);
      }
      return true;
    }, false),
    inlineStyle: (id) => withNode(id, (el) => el.getAttribute("style") || "", ""),
    setInlineStyle: (id, text) => withNode(id, (el) => { el.setAttribute("style", text); return true; }, false),
    setStyleProperty: (id, name, value, priority, subtree) => withNode(id, (el) => {
      const targets = subtree ? [el, ...el.querySelectorAll("*")] : [el];
      for (const target of targets) target.style.setProperty(name, value, priority || "");
      return targets.length;
    }, 0),
    scrollMetrics: (id) => withNode(id, (el) => ({
      scrollTop: el.scrollTop,
      scrollHeight: el.scrollHeight,
      clientHeight: el.clientHeight,
    })),
    scrollBy: (id, amount) => withNode(id, (el) => { el.scrollTop += amount; return true; }, false),
    viewport: () => ({
      width: window.innerWidth || document.documentElement.clientWidth,
      height: window.innerHeight || document.documentElement.clientHeight,
    }),
    toggleRootClass: (name, enabled) => {
      document.documentElement.classList.toggle(name, !!enabled);
      return true;
    },
    setRootProperty: (name, value) => {
      document.documentElement.style.setProperty(name, value);
      return true;
    },
    dispatchResize: () => {
      window.dispatchEvent(new Event("resize"));
      return true;
    },
    installStyle: (styleId, css) => {
      if (document.getElementById(styleId)) return false;
      const style = document.createElement("style");
      style.id = styleId;
      style.textContent = css;
      (document.head || document.documentElement).appendChild(style);
      return true;
    },
    watchPanel: (panelSelectors) => {
      let panel = null;
      for (const selector of panelSelectors) {
        panel = selectAll(document, selector).find(visible) || null;
        if (panel) break;
      }
      if (panel === watched) return false;
      if (styleObserver) styleObserver.disconnect();
      watched = panel;
      if (!panel) return false;
      styleObserver = new MutationObserver(() => notify("onPanelStyleMutated"));
      styleObserver.observe(panel, { attributes: true, attributeFilter: ["style"] });
      return true;
    },
  };
  window.$namespace = api;

  // capture phase: the reader swallows some keys (Escape) before bubbling
  document.addEventListener("keydown", (event) => {
    if (!CODES.has(event.code)) return;
    const target = event.target;
    const editable = !!(target && target.closest && target.closest(EDITABLE));
    if (!editable) {
      event.preventDefault();
      event.stopPropagation();
    }
    notify("onKey", event.code, editable);
  }, true);

  document.addEventListener("pointerdown", (event) => {
    if (event.isTrusted) notify("onPointerDown", event.clientX);
  }, true);

  const looksLikePanel = (el) => {
    const name = typeof el.className === "string" ? el.className : "";
    return name.includes("review") || name.includes("panel") || !!el.querySelector('[class*="review"]');
  };
  const panelObserver = new MutationObserver((mutations) => {
    if (panelsPending) return;
    for (const mutation of mutations) {
      for (const added of mutation.addedNodes) {
        if (added instanceof HTMLElement && looksLikePanel(added)) {
          panelsPending = true;
          setTimeout(() => {
            panelsPending = false;
            notify("onPanelsAdded");
          }, 0);
          return;
        }
      }
    }
  });
  panelObserver.observe(document.body || document.documentElement, { childList: true, subtree: true });
  connect();
})();
"""
)


def build_bootstrap_script(codes: Iterable[str]) -> str:
    """Runtime plus input hooks for the given ``KeyboardEvent.code`` values."""
    return _BOOTSTRAP.substitute(
        namespace=RUNTIME_NAMESPACE,
        bridge=BRIDGE_NAME,
        codes=json.dumps(sorted(set(codes))),
        editable=json.dumps(selectors.EDITABLE_SELECTOR),
    ).strip()


def build_call_script(method: str, *args: object) -> str:
    """Expression calling ``window.__wxrd.<method>`` with JSON arguments."""
    arguments = ", ".join(json.dumps(arg) for arg in args)
    return (
        f"(() => {{ const api = window.{RUNTIME_NAMESPACE}; "
        f"return api ? api.{method}({arguments}) : null; }})()"
    )
