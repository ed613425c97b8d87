# Reservation view API tests


class TestReservationViews:
    """Reservation history and confirmation queues"""

    def test_my_reservations(self, client, store, student_headers, food_bank_login,
                             dining_hall_donation, student_group_donation, donation_ops):
        first = donation_ops.reserve(dining_hall_donation.id, 'student', "4pm", 2)
        donation_ops.reserve(dining_hall_donation.id, 'food-bank', "4pm", 1)
        second = donation_ops.reserve(student_group_donation.id, 'student', "6pm", 1)

        response = client.get("/api/reservations/mine", headers=student_headers)

        assert response.status_code == 200
        entries = response.json()["data"]
        assert [e["reservation"]["id"] for e in entries] == [second.id, first.id]
        assert entries[0]["food_item"] == "Bagels"
        assert entries[1]["pickup_location"] == "Valentine Dining Hall"

        food_bank_entries = client.get("/api/reservations/mine", headers=food_bank_login[0]).json()["data"]
        assert len(food_bank_entries) == 1

    def test_staff_has_no_reservations_view(self, client, staff_headers):
        assert client.get("/api/reservations/mine", headers=staff_headers).status_code == 403

    def test_confirmation_queues(self, client, staff_headers, dining_hall_donation,
                                 student_group_donation, donation_ops):
        first = donation_ops.reserve(dining_hall_donation.id, 'student', "4pm", 2)
        second = donation_ops.reserve(dining_hall_donation.id, 'food-bank', "5pm", 3)
        donation_ops.reserve(student_group_donation.id, 'student', "6pm", 1)
        donation_ops.complete_pickup(dining_hall_donation.id, first.id)

        response = client.get("/api/reservations/confirmations", headers=staff_headers)

        assert response.status_code == 200
        queues = response.json()["data"]
        assert [e["reservation"]["id"] for e in queues["pending"]] == [second.id]
        assert [e["reservation"]["id"] for e in queues["completed"]] == [first.id]
        assert queues["completed"][0]["reservation"]["status"] == "completed"

    def test_confirmations_staff_only(self, client, student_headers):
        assert client.get("/api/reservations/confirmations", headers=student_headers).status_code == 403
