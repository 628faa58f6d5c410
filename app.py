"""
app.py
Streamlit Gym Management System (admins, trainers, members).
Run: streamlit run app.py
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, time, timedelta

import streamlit as st

import utils
from auth import AuthService
from config import get_settings
from db import Database
from directory import UserDirectory
from errors import DuplicateUsername, GymError, InvalidCredentials, PermissionDenied
from logging_config import get_logger, setup_logging
from memberships import MembershipService, MembershipStore
from merch import MerchService, MerchStore
from models import PLAN_MONTHS, Identity, Role
from permissions import can_manage_class, refresh_identity, require_role
from workouts import WorkoutClassService, WorkoutClassStore

st.set_page_config(page_title="Gym Management System", layout="wide")


@dataclass(frozen=True)
class Services:
    auth: AuthService
    workouts: WorkoutClassService
    memberships: MembershipService
    merch: MerchService


@st.cache_resource
def get_services() -> Services:
    # Initialize logging + DB once per server process
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file or None)
    database = Database.from_settings(settings)
    database.init_db()
    return Services(
        auth=AuthService(
            UserDirectory(database, get_logger("directory")),
            rounds=settings.bcrypt_rounds,
            logger=get_logger("auth"),
        ),
        workouts=WorkoutClassService(WorkoutClassStore(database), get_logger("workouts")),
        memberships=MembershipService(MembershipStore(database), logger=get_logger("memberships")),
        merch=MerchService(MerchStore(database), get_logger("merch")),
    )


def current_user(svc: Services) -> Identity | None:
    # Re-checked on every run so a deleted account loses its session.
    me = refresh_identity(svc.auth, st.session_state.get("identity"))
    if me is None:
        logout()
    return me


def logout():
    st.session_state.identity = None
    st.session_state.page = None


# ---------- Login / register ----------

def login_screen(svc: Services):
    st.title("🔐 Gym Login")

    tab_login, tab_register = st.tabs(["Login", "Register"])
    with tab_login:
        username = st.text_input("Username", key="login_username")
        password = st.text_input("Password", type="password", key="login_password")
        if st.button("Login", type="primary"):
            try:
                st.session_state.identity = svc.auth.login(username.strip(), password)
                st.rerun()
            except InvalidCredentials as e:
                st.error(str(e))

    with tab_register:
        register_form(svc)


def register_form(svc: Services):
    col1, col2 = st.columns(2)
    with col1:
        username = st.text_input("Username", key="reg_username")
        p1 = st.text_input("Password", type="password", key="reg_p1")
        p2 = st.text_input("Confirm password", type="password", key="reg_p2")
        role = st.selectbox("Role", list(Role), format_func=lambda r: r.label)
    with col2:
        email = st.text_input("Email", key="reg_email")
        phone = st.text_input("Phone", key="reg_phone")
        address = st.text_input("Address", key="reg_address")

    if st.button("Create account", type="primary"):
        if not username.strip():
            st.error("Username is required.")
            return
        if len(p1) < 6:
            st.error("Password must be at least 6 characters.")
            return
        if p1 != p2:
            st.error("Passwords do not match.")
            return
        try:
            created = svc.auth.register(
                username.strip(), p1, email.strip() or None, phone.strip() or None, address.strip() or None, role
            )
        except DuplicateUsername as e:
            st.error(str(e))
            return
        st.success(f"Account '{created.username}' created ({created.role.label}). You can log in now.")


# ---------- Shared pages ----------

def merch_list_page(svc: Services):
    st.header("🛍️ Merch")
    items = svc.merch.list_all()
    if items:
        st.dataframe(utils.merch_frame(items), use_container_width=True, hide_index=True)
    else:
        st.caption("No merch items yet.")


def buy_membership_form(svc: Services, me: Identity):
    st.subheader("Buy membership")
    c1, c2, c3 = st.columns(3)
    with c1:
        plan = st.selectbox("Plan", list(PLAN_MONTHS.keys()))
    with c2:
        cost = st.text_input("Cost", value="49.99")
    with c3:
        description = st.text_input("Description", value="")

    months = PLAN_MONTHS[plan]
    st.info(f"Starts today, ends **{utils.add_months(date.today(), months).isoformat()}**")

    if st.button("Purchase", type="primary"):
        try:
            m = svc.memberships.purchase(me.id, plan, description.strip() or None, cost, months)
        except ValueError as e:
            st.error(str(e))
            return
        st.success(f"Membership #{m.id} purchased ({utils.format_money(m.cost)}).")
        st.rerun()


def my_memberships_page(svc: Services, me: Identity):
    st.header("🎟️ My memberships")
    rows = svc.memberships.list_by_holder(me.id)
    st.metric("Total spent", utils.format_money(svc.memberships.total_expenses(me.id)))
    if rows:
        st.dataframe(utils.memberships_frame(rows), use_container_width=True, hide_index=True)
    else:
        st.caption("No memberships yet.")
    st.divider()
    buy_membership_form(svc, me)


# ---------- Admin ----------

def admin_users_page(svc: Services, me: Identity):
    require_role(me, Role.ADMIN)
    st.header("👥 Users")

    role_filter = st.selectbox("Role", ["All"] + [r.label for r in Role])
    if role_filter == "All":
        users = svc.auth.list_all()
    else:
        users = svc.auth.list_by_role(Role(role_filter.lower()))
    st.dataframe(utils.users_frame(users), use_container_width=True, hide_index=True)

    st.divider()
    st.subheader("Delete user")
    ids = [u.id for u in users]
    selected = st.selectbox("User ID", ["(none)"] + [str(i) for i in ids])
    if selected != "(none)":
        if int(selected) == me.id:
            st.warning("This is your own account. Deleting it logs you out.")
        confirm = st.checkbox("Confirm delete", value=False, key="del_user_confirm")
        if st.button("Delete", disabled=not confirm):
            if svc.auth.delete(int(selected)):
                st.success("User deleted.")
                if int(selected) == me.id:
                    logout()
            else:
                st.error("User not found.")
            st.rerun()


def admin_memberships_page(svc: Services, me: Identity):
    require_role(me, Role.ADMIN)
    st.header("💳 Memberships")

    memberships = svc.memberships.list_all()
    st.metric("Total revenue", utils.format_money(svc.memberships.total_revenue()))
    if memberships:
        st.dataframe(utils.memberships_frame(memberships), use_container_width=True, hide_index=True)
    else:
        st.caption("No memberships sold yet.")

    st.subheader("Revenue summary by month")
    st.dataframe(utils.revenue_summary_by_month(memberships), use_container_width=True, hide_index=True)


def admin_merch_page(svc: Services, me: Identity):
    require_role(me, Role.ADMIN)
    merch_list_page(svc)
    st.metric("Total stock value", utils.format_money(svc.merch.total_stock_value()))

    st.divider()
    st.subheader("➕ Add merch item")
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        name = st.text_input("Name")
    with c2:
        item_type = st.selectbox("Type", ["Gear", "Drink", "Food", "Apparel"])
    with c3:
        price = st.text_input("Unit price", value="10.00")
    with c4:
        quantity = st.number_input("Quantity", min_value=0, value=10, step=1)

    if st.button("Add item", type="primary"):
        if not name.strip():
            st.error("Name is required.")
            return
        try:
            if utils.to_decimal(price) < 0:
                st.error("Unit price must not be negative.")
                return
            svc.merch.add(name.strip(), item_type, price, int(quantity))
        except ValueError:
            st.error("Unit price must be numeric.")
            return
        st.success("Item added.")
        st.rerun()


def admin_reports_page(svc: Services, me: Identity):
    require_role(me, Role.ADMIN)
    st.header("🧾 Reports")

    exports = [
        ("users.csv", utils.users_to_csv_bytes(svc.auth.list_all())),
        ("classes.csv", utils.classes_to_csv_bytes(svc.workouts.list_all())),
        ("memberships.csv", utils.memberships_to_csv_bytes(svc.memberships.list_all())),
        ("merch.csv", utils.merch_to_csv_bytes(svc.merch.list_all())),
    ]
    for file_name, data in exports:
        st.download_button(f"Download {file_name}", data=data, file_name=file_name, mime="text/csv")


def admin_settings_page(svc: Services, me: Identity):
    require_role(me, Role.ADMIN)
    st.header("⚙️ Settings")
    st.subheader("Sample data")
    st.caption(
        "Creates demo_trainer / demo_member (password: changeme123) and adds "
        "classes, memberships and merch (adds new rows each run)."
    )
    if st.button("Insert sample data"):
        utils.insert_sample_data(svc.auth, svc.workouts, svc.memberships, svc.merch)
        st.success("Sample data inserted.")
        st.rerun()


# ---------- Trainer ----------

def class_form(prefix: str, existing=None):
    c1, c2, c3 = st.columns(3)
    with c1:
        class_type = st.text_input("Type", value=(existing.class_type if existing else ""), key=f"{prefix}_type")
        description = st.text_input(
            "Description", value=(existing.description or "" if existing else ""), key=f"{prefix}_desc"
        )
    with c2:
        default_at = existing.scheduled_at if existing else datetime.combine(date.today() + timedelta(days=1), time(9, 0))
        day = st.date_input("Date", value=default_at.date(), key=f"{prefix}_date")
        at = st.time_input("Time", value=default_at.time(), key=f"{prefix}_time")
    with c3:
        capacity = st.number_input(
            "Capacity", min_value=1, value=(max(existing.capacity, 1) if existing else 10), step=1, key=f"{prefix}_cap"
        )
    return class_type.strip(), description.strip() or None, utils.combine_schedule(day, at), int(capacity)


def trainer_classes_page(svc: Services, me: Identity):
    require_role(me, Role.TRAINER)
    st.header("📅 My classes")

    classes = svc.workouts.list_by_owner(me.id)
    if classes:
        st.dataframe(utils.classes_frame(classes), use_container_width=True, hide_index=True)
    else:
        st.caption("You have no classes yet.")

    st.divider()
    st.subheader("➕ Create class")
    class_type, description, scheduled_at, capacity = class_form("new")
    if st.button("Create", type="primary"):
        if not class_type:
            st.error("Type is required.")
        else:
            svc.workouts.create(me.id, class_type, description, scheduled_at, capacity)
            st.success("Class created.")
            st.rerun()

    if not classes:
        return

    st.divider()
    st.subheader("✏️ Edit / delete")
    options = {f"#{c.id} {c.class_type} @ {c.scheduled_at:%Y-%m-%d %H:%M}": c for c in classes}
    chosen = options[st.selectbox("Class", list(options.keys()))]
    if not can_manage_class(me, chosen):
        st.error("You can only change your own classes.")
        return

    class_type, description, scheduled_at, capacity = class_form(f"edit_{chosen.id}", existing=chosen)
    c1, c2 = st.columns(2)
    with c1:
        if st.button("Save changes"):
            updated = replace(
                chosen,
                class_type=class_type or chosen.class_type,
                description=description,
                scheduled_at=scheduled_at,
                capacity=capacity,
            )
            if svc.workouts.update(updated):
                st.success("Class updated.")
                st.rerun()
            else:
                st.error("Class not found or not yours.")
    with c2:
        confirm = st.checkbox("Confirm delete", value=False, key="del_class_confirm")
        if st.button("Delete class", disabled=not confirm):
            if svc.workouts.delete(chosen.id, me.id):
                st.success("Class deleted.")
                st.rerun()
            else:
                st.error("Class not found or not yours.")


# ---------- Member ----------

def browse_classes_page(svc: Services, me: Identity):
    st.header("🏋️ Workout classes")
    classes = svc.workouts.list_all()
    upcoming_only = st.checkbox("Upcoming only", value=True)
    if upcoming_only:
        now = datetime.now()
        classes = [c for c in classes if c.scheduled_at >= now]
    if classes:
        st.dataframe(utils.classes_frame(classes), use_container_width=True, hide_index=True)
    else:
        st.caption("No classes scheduled.")


# ---------- Navigation ----------

PAGES = {
    Role.ADMIN: {
        "Users": admin_users_page,
        "Memberships": admin_memberships_page,
        "Merch": admin_merch_page,
        "Reports": admin_reports_page,
        "Settings": admin_settings_page,
    },
    Role.TRAINER: {
        "My classes": trainer_classes_page,
        "All classes": browse_classes_page,
        "My memberships": my_memberships_page,
        "Merch": lambda svc, me: merch_list_page(svc),
    },
    Role.MEMBER: {
        "Classes": browse_classes_page,
        "My memberships": my_memberships_page,
        "Merch": lambda svc, me: merch_list_page(svc),
    },
}


def main_app(svc: Services, me: Identity):
    st.sidebar.title("🏋️ Gym System")
    st.sidebar.caption(f"Logged in as: {me.username} ({me.role.label})")

    pages = PAGES[me.role]
    names = list(pages.keys())
    if st.session_state.get("page") not in names:
        st.session_state.page = names[0]
    st.session_state.page = st.sidebar.radio("Navigate", names, index=names.index(st.session_state.page))

    if st.sidebar.button("Logout"):
        logout()
        st.rerun()

    try:
        pages[st.session_state.page](svc, me)
    except PermissionDenied as e:
        st.error(str(e))
    except GymError as e:
        st.error(f"Something went wrong: {e}")


# --------- App entry ---------

def run():
    svc = get_services()
    me = current_user(svc)
    if me is None:
        login_screen(svc)
        return
    main_app(svc, me)


if __name__ == "__main__":
    run()
