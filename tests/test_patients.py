from datetime import date, time

from medbook.models import AppointmentStatus


def test_patient_dashboard(client, doctor, patient, make_appointment):
    # Clock is pinned to 2025-06-02
    make_appointment(doctor, patient, day=date(2025, 6, 9), slot_time=time(9, 0))
    make_appointment(doctor, patient, day=date(2025, 6, 2), slot_time=time(9, 0), status=AppointmentStatus.CONFIRMED)
    for offset in range(1, 8):
        make_appointment(doctor, patient, day=date(2025, 5, offset), slot_time=time(10, 0))

    response = client.get("/patients/profile", headers=patient.headers)

    assert response.status_code == 200
    data = response.json()
    assert data["profile"]["id"] == patient.id
    assert data["profile"]["firstName"] == "Ahmed"
    assert data["profile"]["userType"] == "patient"
    assert [a["date"] for a in data["upcomingAppointments"]] == ["2025-06-02", "2025-06-09"]
    assert data["upcomingAppointments"][0]["doctorLastName"] == "Benali"
    assert [a["date"] for a in data["pastAppointments"]] == [
        "2025-05-07",
        "2025-05-06",
        "2025-05-05",
        "2025-05-04",
        "2025-05-03",
    ]


def test_patient_dashboard_is_scoped_to_patient(client, doctor, make_patient, make_appointment):
    patient, other = make_patient(), make_patient()
    make_appointment(doctor, other, day=date(2025, 6, 9))

    data = client.get("/patients/profile", headers=patient.headers).json()

    assert data["upcomingAppointments"] == []
    assert data["pastAppointments"] == []


def test_patient_dashboard_requires_patient(client, doctor):
    response = client.get("/patients/profile", headers=doctor.headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Only patients can perform this action"
