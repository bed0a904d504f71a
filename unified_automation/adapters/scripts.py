"""
In-page scripts shared by both backends.

Each script is a JavaScript function source taking the selector first. Both
adapters run the same source so reads compute identical results whatever the
engine: Playwright calls them through page.evaluate(), Selenium through
execute_script() with a small wrapper (see selenium_adapter.call_script).
"""

POINTER_EVENTS_ENABLED = """(sel) => {
    const el = document.querySelector(sel);
    return !!el && getComputedStyle(el).pointerEvents !== 'none';
}"""

DISPATCH_CLICK = """(sel) => {
    const el = document.querySelector(sel);
    if (el) {
        el.dispatchEvent(new MouseEvent('click', { bubbles: true, cancelable: true, view: window }));
    }
}"""

NOTIFY_VALUE_CHANGED = """(sel) => {
    const el = document.querySelector(sel);
    if (el) {
        el.dispatchEvent(new Event('input', { bubbles: true }));
        el.dispatchEvent(new Event('change', { bubbles: true }));
    }
}"""

IS_EDITABLE = """(sel) => {
    const el = document.querySelector(sel);
    if (!el) return false;
    if (el.isContentEditable) return true;
    const tag = el.tagName.toLowerCase();
    if (tag === 'textarea') return true;
    if (tag !== 'input') return false;
    const nonText = ['button', 'checkbox', 'radio', 'submit', 'reset', 'file', 'image', 'hidden'];
    return !nonText.includes((el.getAttribute('type') || 'text').toLowerCase());
}"""

SCROLL_INTO_VIEW = """(sel) => {
    const el = document.querySelector(sel);
    if (el) el.scrollIntoView({ block: 'center', inline: 'center' });
}"""

IS_VISIBLE = """(sel) => {
    const el = document.querySelector(sel);
    if (!el) return false;
    const style = getComputedStyle(el);
    if (style.visibility === 'hidden' || style.display === 'none') return false;
    const rect = el.getBoundingClientRect();
    return rect.width > 0 && rect.height > 0;
}"""

IS_DISABLED = """(sel) => {
    const el = document.querySelector(sel);
    if (!el) return false;
    return el.disabled === true || el.getAttribute('aria-disabled') === 'true';
}"""

TEXT_CONTENT = """(sel) => {
    const el = document.querySelector(sel);
    return el ? (el.textContent || '') : '';
}"""

INPUT_VALUE = """(sel) => {
    const el = document.querySelector(sel);
    if (!el || el.value === undefined || el.value === null) return '';
    return String(el.value);
}"""

GET_ATTRIBUTE = """(sel, name) => {
    const el = document.querySelector(sel);
    return el ? el.getAttribute(name) : null;
}"""

READ_CLIPBOARD = "() => navigator.clipboard.readText()"

DOCUMENT_READY = "() => document.readyState === 'complete'"

IS_HIDDEN = f"(sel) => !({IS_VISIBLE})(sel)"

COUNT_ELEMENTS = "(sel) => document.querySelectorAll(sel).length"
