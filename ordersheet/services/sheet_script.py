"""
Receiver script users paste into Google Apps Script.

Deployed as a web app ("Anyone" access), it appends posted rows to the first
sheet of the target spreadsheet and answers "Success" so the webhook client
can tell it worked.
"""
import re

SHEET_ID_PATTERN = re.compile(r"/spreadsheets/d/([a-zA-Z0-9_-]+)")

SCRIPT_TEMPLATE = """// COPY ALL OF THIS CODE
function doPost(e) {
  if (typeof e === 'undefined') {
    return ContentService.createTextOutput("Error: Event object 'e' is undefined. You cannot run this function manually from the editor. It must be triggered by the App.");
  }

  var lock = LockService.getScriptLock();
  if (!lock.tryLock(10000)) {
     return ContentService.createTextOutput("Error: Could not obtain lock.");
  }

  try {
    var sheet = SpreadsheetApp.openById("__SHEET_ID__").getSheets()[0];

    var rawData = e.postData ? e.postData.contents : null;
    if (!rawData) return ContentService.createTextOutput("Error: No data received.");

    var data = JSON.parse(rawData);

    if (data.items && data.items.length > 0) {
      var rows = data.items.map(function(item) {
        return [
          item.vendor || "",
          item.description || "",
          item.inStock || 0,
          item.par || 0,
          item.order || 0,
          item.price || 0
        ];
      });
      sheet.getRange(sheet.getLastRow() + 1, 1, rows.length, rows[0].length).setValues(rows);
    }

    return ContentService.createTextOutput("Success").setMimeType(ContentService.MimeType.TEXT);
  } catch (err) {
    return ContentService.createTextOutput("Error: " + err.toString());
  } finally {
    lock.releaseLock();
  }
}"""


def sheet_id_from_url(sheet_url: str) -> str | None:
    match = SHEET_ID_PATTERN.search(sheet_url or "")
    return match.group(1) if match else None


def render_script(sheet_url: str) -> str:
    """Apps Script source bound to the spreadsheet behind ``sheet_url``"""
    sheet_id = sheet_id_from_url(sheet_url) or "YOUR_SHEET_ID"
    return SCRIPT_TEMPLATE.replace("__SHEET_ID__", sheet_id)
