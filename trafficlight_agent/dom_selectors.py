"""
Selectors - DOM coordinates of element-web used by the action dispatcher.

🚨 CRITICAL: These are a contract with the application under test. They are
fixed CSS selectors, never discovered at runtime. When element-web renames a
class, update it here.
"""

# Server picker (shared by register and login)
SERVER_PICKER_CHANGE = ".mx_ServerPicker_change"
SERVER_PICKER_DIALOG = ".mx_ServerPickerDialog"
SERVER_PICKER_HOMESERVER = ".mx_ServerPickerDialog_otherHomeserver"
SERVER_PICKER_CONTINUE = ".mx_ServerPickerDialog_continue"

# Registration
REGISTRATION_USERNAME = "#mx_RegistrationForm_username"
REGISTRATION_PASSWORD = "#mx_RegistrationForm_password"
REGISTRATION_PASSWORD_CONFIRM = "#mx_RegistrationForm_passwordConfirm"
USE_CASE_SKIP = ".mx_UseCaseSelection_skip > .mx_AccessibleButton"

# Login
LOGIN_USERNAME = "#mx_LoginForm_username"
LOGIN_PASSWORD = "#mx_LoginForm_password"
LOGIN_SUBMIT = ".mx_Login_submit"

# Cross-signing
COMPLETE_SECURITY_START = ".mx_CompleteSecurity_actionRow > .mx_AccessibleButton"
TOAST_VERIFY = ".mx_Toast_buttons > .mx_AccessibleButton_kind_primary"
VERIFY_WITH_EMOJI = ".mx_VerificationPanel_QRPhase_startOption > .mx_AccessibleButton"
SAS_CONFIRM = ".mx_VerificationShowSas_buttonRow > .mx_AccessibleButton_kind_primary"
USER_INFO_DONE = ".mx_UserInfo_container > .mx_AccessibleButton"

# Room creation
ROOM_LIST_PLUS = ".mx_RoomListHeader_plusButton"
CONTEXT_MENU = ".mx_ContextualMenu"
CONTEXT_MENU_OPTION = "[role='menuitem']"
NEW_ROOM_LABEL = "New room"
CREATE_ROOM_NAME = ".mx_CreateRoomDialog_name input"
CREATE_ROOM_TOPIC = ".mx_CreateRoomDialog_topic input"
DIALOG_PRIMARY = ".mx_Dialog_primary"
DIALOG_CANCEL = ".mx_Dialog_cancelButton"

# Timeline
MESSAGE_COMPOSER = ".mx_SendMessageComposer div[contenteditable=true]"

# Room settings and members
ROOM_SUMMARY_BUTTON = ".mx_RightPanel_roomSummaryButton"
ROOM_SUMMARY_SETTINGS = ".mx_RoomSummaryCard_icon_settings"
ROOM_SUMMARY_PEOPLE = ".mx_RoomSummaryCard_icon_people"
SECURITY_TAB = "[data-testid='settings-tab-ROOM_SECURITY_TAB']"
BASE_CARD_CLOSE = "[data-test-id=base-card-close-button]"
MEMBER_LIST_INVITE = ".mx_MemberList_invite"
INVITE_ADDRESS_BAR = ".mx_InviteDialog_addressBar input"
INVITE_GO = ".mx_InviteDialog_goButton"

HISTORY_VISIBILITIES = ("shared", "invited", "joined")


def history_visibility_option(visibility: str) -> str:
    """Label wrapping the radio button for one history visibility setting."""
    return f"label:has(#historyVis-{visibility})"
